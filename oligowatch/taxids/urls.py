# taxids/urls.py
from django.urls import path
from . import views

app_name = 'taxids'

urlpatterns = [
    path('', views.taxid_list, name='taxid_list'),
    path('delete/<int:entry_id>/', views.taxid_delete, name='taxid_delete'),
    path('api/lookup/', views.taxid_lookup, name='taxid_lookup'),
]
