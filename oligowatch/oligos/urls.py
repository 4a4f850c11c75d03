# oligos/urls.py
from django.urls import path
from . import views

app_name = 'oligos'

urlpatterns = [
    path('', views.oligo_list, name='oligo_list'),
    path('create/', views.oligo_create, name='oligo_create'),
    path('import/', views.oligo_import, name='oligo_import'),
    path('bulk/', views.oligo_bulk_action, name='oligo_bulk_action'),
    path('<int:oligo_id>/delete/', views.oligo_delete, name='oligo_delete'),
    path('<int:oligo_id>/reassign/', views.oligo_reassign, name='oligo_reassign'),
]
