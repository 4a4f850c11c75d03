# blast/urls.py
from django.urls import path
from . import views

app_name = 'blast'

urlpatterns = [
    path('planner/', views.blast_planner, name='planner'),
    path('results/', views.blast_results, name='results'),
    path('results/delete/', views.blast_results_delete, name='results_delete'),
    path('results/<int:align_id>/', views.blast_result_detail, name='result_detail'),
    path('results/<int:align_id>/csv/', views.blast_result_csv, name='result_csv'),
]
