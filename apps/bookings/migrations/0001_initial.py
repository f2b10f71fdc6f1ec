import apps.bookings.models
import django.db.models.deletion
import django.utils.timezone
import shared.infrastructure.fields
from decimal import Decimal
from django.conf import settings
from django.db import migrations, models

BOOKING_STATUS_CHOICES = [
    ("pending", "Pending"),
    ("approved", "Approved"),
    ("confirmed", "Confirmed"),
    ("checked_in", "Checked in"),
    ("checked_out", "Checked out"),
    ("cancelled", "Cancelled"),
    ("rejected", "Rejected"),
]

PAYMENT_STATUS_CHOICES = [
    ("pending", "Pending"),
    ("partial", "Partial"),
    ("completed", "Completed"),
    ("failed", "Failed"),
    ("refunded", "Refunded"),
    ("refund_pending", "Refund pending"),
]


def money(**kwargs):
    return models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=12, **kwargs)


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("properties", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Booking",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "client_id",
                    models.CharField(db_index=True, help_text="Client account the tenant belongs to.", max_length=64),
                ),
                ("booking_code", models.CharField(editable=False, max_length=12, unique=True)),
                ("room_type", models.CharField(max_length=40)),
                ("room_type_name", models.CharField(blank=True, max_length=120)),
                ("room_capacity", models.PositiveSmallIntegerField(default=1)),
                ("move_in_date", models.DateField()),
                ("move_out_date", models.DateField()),
                (
                    "duration_type",
                    models.CharField(
                        choices=[("monthly", "Monthly"), ("daily", "Daily"), ("custom", "Custom")],
                        default="monthly",
                        max_length=10,
                    ),
                ),
                ("duration_days", models.PositiveIntegerField(blank=True, null=True)),
                ("duration_months", models.PositiveIntegerField(blank=True, null=True)),
                ("person_count", models.PositiveSmallIntegerField(default=1)),
                ("customer_name", models.CharField(blank=True, max_length=255)),
                ("customer_age", models.PositiveSmallIntegerField(blank=True, null=True)),
                ("customer_gender", models.CharField(blank=True, max_length=20)),
                ("customer_mobile", models.CharField(blank=True, max_length=20)),
                ("customer_email", models.EmailField(blank=True, max_length=254)),
                ("id_proof_type", models.CharField(blank=True, max_length=50)),
                ("id_proof_number", shared.infrastructure.fields.EncryptedCharField(blank=True, help_text="Stored encrypted.")),
                ("purpose", models.CharField(blank=True, max_length=255)),
                ("special_requests", models.TextField(blank=True)),
                ("monthly_rent", money()),
                ("total_rent", money()),
                ("security_deposit", money()),
                ("advance_amount", money()),
                ("maintenance_fee", money()),
                ("amount_paid", money()),
                (
                    "payment_method",
                    models.CharField(default=apps.bookings.models.default_payment_method, max_length=30),
                ),
                (
                    "payment_status",
                    models.CharField(choices=PAYMENT_STATUS_CHOICES, default="pending", max_length=20),
                ),
                ("transaction_id", models.CharField(blank=True, max_length=120)),
                ("payment_date", models.DateTimeField(blank=True, null=True)),
                ("outstanding_amount", money()),
                (
                    "booking_status",
                    models.CharField(choices=BOOKING_STATUS_CHOICES, default="pending", max_length=20),
                ),
                ("approved_at", models.DateTimeField(blank=True, null=True)),
                ("rejected_at", models.DateTimeField(blank=True, null=True)),
                ("rejection_reason", models.TextField(blank=True)),
                ("cancelled_at", models.DateTimeField(blank=True, null=True)),
                ("checked_in_at", models.DateTimeField(blank=True, null=True)),
                ("checked_out_at", models.DateTimeField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "approved_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="+",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "property",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="bookings",
                        to="properties.property",
                    ),
                ),
                (
                    "rejected_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="+",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "user",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="bookings",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "verbose_name": "Booking",
                "verbose_name_plural": "Bookings",
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["property", "booking_status"], name="booking_property_status_idx"),
                    models.Index(
                        fields=["property", "move_in_date", "move_out_date"], name="booking_property_dates_idx"
                    ),
                    models.Index(fields=["user", "-created_at"], name="booking_user_created_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("move_out_date__gt", models.F("move_in_date"))),
                        name="booking_valid_dates",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="BookingRoom",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("bed_identifier", models.CharField(db_index=True, max_length=255)),
                ("sharing_type", models.CharField(max_length=40)),
                ("floor", models.IntegerField()),
                ("room_number", models.CharField(max_length=40)),
                ("bed_label", models.CharField(max_length=120)),
                ("position", models.PositiveSmallIntegerField(default=0)),
                (
                    "booking",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="room_details",
                        to="bookings.booking",
                    ),
                ),
            ],
            options={
                "verbose_name": "Booked bed",
                "verbose_name_plural": "Booked beds",
                "ordering": ["position", "id"],
                "constraints": [
                    models.UniqueConstraint(fields=("booking", "bed_identifier"), name="booking_room_unique_bed"),
                ],
            },
        ),
        migrations.CreateModel(
            name="Payment",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("amount", models.DecimalField(decimal_places=2, max_digits=12)),
                (
                    "method",
                    models.CharField(
                        choices=[
                            ("online", "Online"),
                            ("offline", "Offline"),
                            ("wallet", "Wallet"),
                            ("cash", "Cash"),
                            ("bank_transfer", "Bank transfer"),
                        ],
                        max_length=20,
                    ),
                ),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("pending", "Pending"),
                            ("completed", "Completed"),
                            ("failed", "Failed"),
                            ("refunded", "Refunded"),
                        ],
                        default="pending",
                        max_length=20,
                    ),
                ),
                ("transaction_id", models.CharField(blank=True, max_length=120)),
                ("description", models.CharField(blank=True, max_length=255)),
                ("paid_at", models.DateTimeField(default=django.utils.timezone.now)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "booking",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="payments",
                        to="bookings.booking",
                    ),
                ),
            ],
            options={
                "verbose_name": "Payment",
                "verbose_name_plural": "Payments",
                "ordering": ["paid_at", "id"],
            },
        ),
    ]
