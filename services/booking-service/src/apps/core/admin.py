from django.contrib import admin
from .models import Customer, Pet, Service, Appointment, AppointmentService


class PetInline(admin.TabularInline):
    model = Pet
    extra = 0
    fields = ['name', 'breed', 'size', 'notes']


class AppointmentServiceInline(admin.TabularInline):
    model = AppointmentService
    extra = 0
    readonly_fields = ['service', 'quantity', 'unit_duration_minutes', 'unit_price']
    can_delete = False


@admin.register(Customer)
class CustomerAdmin(admin.ModelAdmin):
    list_display = ['email', 'first_name', 'last_name', 'phone', 'marketing_consent', 'created_at']
    search_fields = ['email', 'first_name', 'last_name']
    inlines = [PetInline]


@admin.register(Service)
class ServiceAdmin(admin.ModelAdmin):
    list_display = ['code', 'name', 'category', 'duration_minutes', 'price', 'is_active']
    list_filter = ['category', 'is_active']


@admin.register(Appointment)
class AppointmentAdmin(admin.ModelAdmin):
    list_display = ['booking_code', 'date', 'time', 'status', 'customer', 'pet', 'total_duration_minutes']
    list_filter = ['status', 'date']
    search_fields = ['booking_code', 'customer__email', 'customer__last_name', 'pet__name']
    readonly_fields = [
        'booking_code', 'customer', 'pet', 'date', 'time', 'status',
        'total_duration_minutes', 'status_changed_at', 'created_at', 'updated_at',
    ]
    inlines = [AppointmentServiceInline]

    def has_add_permission(self, request):
        # Appointments are created through BookingService only
        return False
