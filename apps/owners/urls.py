from django.urls import path
from . import views

app_name = 'owners'

urlpatterns = [
    path('rooms/', views.manage_rooms, name='rooms'),

    path('tenants/', views.list_tenants, name='tenants'),
    path('tenants/assign/', views.assign_tenant, name='assign_tenant'),
    path('tenants/remove/', views.remove_tenant, name='remove_tenant'),

    path('bills/', views.bills, name='bills'),
    path('bills/<uuid:bill_id>/', views.update_bill, name='update_bill'),

    path('reports/', views.reports, name='reports'),
]
