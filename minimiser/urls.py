from django.urls import path
from . import views

urlpatterns = [
    # DFA minimisation (prune, partition, refine)
    path('api/minimise-dfa/', views.min_dfa, name='minimise_dfa'),
]
