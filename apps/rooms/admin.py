from django.contrib import admin
from .models import BoardingHouse, Room, Contract


@admin.register(BoardingHouse)
class BoardingHouseAdmin(admin.ModelAdmin):
    list_display = ['name', 'landlord', 'address', 'created_at']
    search_fields = ['name', 'address', 'landlord__username']
    readonly_fields = ['id', 'created_at', 'updated_at', 'deleted_at']


@admin.register(Room)
class RoomAdmin(admin.ModelAdmin):
    list_display = ['room_number', 'boarding_house', 'landlord', 'tenant', 'price', 'status']
    list_filter = ['status', 'boarding_house']
    search_fields = ['room_number', 'tenant__username', 'landlord__username']
    readonly_fields = ['id', 'created_at', 'updated_at', 'deleted_at']


@admin.register(Contract)
class ContractAdmin(admin.ModelAdmin):
    list_display = ['room', 'tenant', 'start_date', 'end_date', 'monthly_rent', 'status']
    list_filter = ['status']
    search_fields = ['room__room_number', 'tenant__username']
    readonly_fields = ['id', 'created_at', 'updated_at']
