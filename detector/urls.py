from django.urls import path
from . import views

app_name = 'detector'

urlpatterns = [
    path('api/detect', views.detect, name='detect'),
]
