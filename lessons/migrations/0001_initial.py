import uuid

import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Lesson",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("topic", models.CharField(max_length=255)),
                ("location", models.CharField(max_length=255)),
                ("price", models.PositiveIntegerField()),
                ("capacity", models.PositiveIntegerField()),
                ("initial_capacity", models.PositiveIntegerField()),
                ("version", models.PositiveIntegerField(default=0)),
                ("image", models.CharField(blank=True, max_length=500, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "ordering": ["topic"],
                "indexes": [models.Index(fields=["topic"], name="lesson_topic_idx")],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(price__gte=1),
                        name="lesson_price_positive",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(capacity__gte=0)
                        & models.Q(capacity__lte=models.F("initial_capacity")),
                        name="lesson_capacity_within_ceiling",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="Order",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("name", models.CharField(max_length=255)),
                ("phone", models.CharField(max_length=64)),
                ("idempotency_key", models.CharField(blank=True, max_length=255, null=True, unique=True)),
                ("created_at", models.DateTimeField()),
            ],
            options={
                "ordering": ["-created_at"],
                "indexes": [models.Index(fields=["-created_at"], name="order_created_at_idx")],
            },
        ),
        migrations.CreateModel(
            name="OrderLine",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("position", models.PositiveIntegerField()),
                ("seats", models.PositiveIntegerField()),
                (
                    "lesson",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="order_lines",
                        to="lessons.lesson",
                    ),
                ),
                (
                    "order",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="lines",
                        to="lessons.order",
                    ),
                ),
            ],
            options={
                "ordering": ["position"],
                "constraints": [
                    models.UniqueConstraint(fields=("order", "position"), name="order_line_position_unique"),
                    models.CheckConstraint(condition=models.Q(seats__gte=1), name="order_line_seats_positive"),
                ],
            },
        ),
    ]
