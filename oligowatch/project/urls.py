# project/urls.py
from django.urls import path, include

urlpatterns = [
    path('', include('users.urls')),
    path('', include('home.urls')),
    path('assays/', include('assays.urls')),
    path('oligos/', include('oligos.urls')),
    path('taxids/', include('taxids.urls')),
    path('blast/', include('blast.urls')),
]
