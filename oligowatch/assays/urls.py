# assays/urls.py
from django.urls import path
from . import views

app_name = 'assays'

urlpatterns = [
    path('', views.assay_list, name='assay_list'),
    path('create/', views.assay_create, name='assay_create'),
    path('<int:assay_id>/', views.assay_detail, name='assay_detail'),
    path('<int:assay_id>/delete/', views.assay_delete, name='assay_delete'),
]
