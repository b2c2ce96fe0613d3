"""
URL configuration for the savings router API.
"""
from django.urls import path
from savings_router.api.views import PlanRoutesView, health_check

app_name = 'savings_router'

urlpatterns = [
    # Health check endpoint
    path('health/', health_check, name='health_check_get'),

    # Route planning endpoint
    path('plan/', PlanRoutesView.as_view(), name='plan_routes_create'),
]
