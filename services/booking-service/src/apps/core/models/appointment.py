# services/booking-service/src/apps/core/models/appointment.py
"""
Appointment Models

Appointments, their service lines, and the per-date lock row used to
serialize bookings for a calendar day.
"""

from datetime import datetime, timedelta

from django.db import models
from django.db.models import Q

from shared.common.mixins import TimestampMixin

from .catalog import Service
from .party import Customer, Pet


class Appointment(TimestampMixin):
    """
    A booked visit for one pet.

    Created only by the booking engine. After creation, status is the
    only field operators change.
    """

    class Status(models.TextChoices):
        PENDING = 'pending', 'Pending'
        CONFIRMED = 'confirmed', 'Confirmed'
        COMPLETED = 'completed', 'Completed'
        CANCELLED = 'cancelled', 'Cancelled'

    # Allowed operator transitions; terminal states map to nothing
    TRANSITIONS = {
        Status.PENDING: frozenset({Status.CONFIRMED, Status.CANCELLED}),
        Status.CONFIRMED: frozenset({Status.COMPLETED, Status.CANCELLED}),
        Status.COMPLETED: frozenset(),
        Status.CANCELLED: frozenset(),
    }

    booking_code = models.CharField(max_length=32, unique=True, db_index=True)

    customer = models.ForeignKey(
        Customer,
        on_delete=models.PROTECT,
        related_name='appointments'
    )
    pet = models.ForeignKey(
        Pet,
        on_delete=models.PROTECT,
        related_name='appointments'
    )

    date = models.DateField(db_index=True)
    time = models.TimeField()
    total_duration_minutes = models.PositiveIntegerField()

    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.CONFIRMED,
        db_index=True
    )
    status_changed_at = models.DateTimeField(blank=True, null=True)
    notes = models.TextField(blank=True, default='')

    services = models.ManyToManyField(
        Service,
        through='AppointmentService',
        related_name='appointments'
    )

    class Meta:
        db_table = 'appointments'
        ordering = ['date', 'time']
        constraints = [
            # Backstop against two live bookings starting in the same slot
            models.UniqueConstraint(
                fields=['date', 'time'],
                condition=~Q(status='cancelled'),
                name='unique_active_appointment_start'
            ),
        ]
        indexes = [
            models.Index(fields=['date', 'status']),
            models.Index(fields=['customer', 'date']),
        ]

    def __str__(self):
        return f"{self.booking_code} - {self.date} {self.time:%H:%M}"

    @property
    def start_at(self) -> datetime:
        return datetime.combine(self.date, self.time)

    @property
    def end_at(self) -> datetime:
        return self.start_at + timedelta(minutes=self.total_duration_minutes)

    @property
    def is_terminal(self) -> bool:
        return not self.TRANSITIONS[self.Status(self.status)]

    def can_transition_to(self, target: str) -> bool:
        """Check whether the status table allows moving to `target`."""
        return target in self.TRANSITIONS[self.Status(self.status)]

    @classmethod
    def get_for_date(cls, day, include_cancelled=False):
        """Appointments on a date, in start order."""
        queryset = cls.objects.filter(date=day)
        if not include_cancelled:
            queryset = queryset.exclude(status=cls.Status.CANCELLED)
        return queryset.order_by('time')


class AppointmentService(models.Model):
    """
    One selected service on an appointment.

    Duration and price are captured at booking time so later catalog
    edits do not change existing appointments.
    """

    appointment = models.ForeignKey(
        Appointment,
        on_delete=models.CASCADE,
        related_name='service_lines'
    )
    service = models.ForeignKey(
        Service,
        on_delete=models.PROTECT,
        related_name='appointment_lines'
    )
    quantity = models.PositiveIntegerField(default=1)
    unit_duration_minutes = models.PositiveIntegerField()
    unit_price = models.DecimalField(max_digits=8, decimal_places=2)

    class Meta:
        db_table = 'appointment_services'
        constraints = [
            models.UniqueConstraint(
                fields=['appointment', 'service'],
                name='unique_service_per_appointment'
            ),
            models.CheckConstraint(
                condition=Q(quantity__gte=1),
                name='appointment_service_quantity_positive'
            ),
        ]

    def __str__(self):
        return f"{self.appointment.booking_code}: {self.service_id} x{self.quantity}"

    @property
    def line_duration_minutes(self) -> int:
        return self.unit_duration_minutes * self.quantity


class CalendarDay(models.Model):
    """
    Lock row for one calendar date.

    Bookings for the same date write this row before reading occupancy,
    so the check and the insert happen as one unit.
    """

    date = models.DateField(unique=True)
    locked_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'calendar_days'
        ordering = ['date']

    def __str__(self):
        return str(self.date)
