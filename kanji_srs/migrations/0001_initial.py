import datetime

from django.db import migrations, models

import kanji_srs.data.models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="ItemSchedule",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("item_id", models.CharField(max_length=64, unique=True)),
                ("interval_days", kanji_srs.data.models.UnboundedIntegerField(default=0)),
                ("due_at", models.DateTimeField(default=datetime.datetime(1970, 1, 1, 0, 0, tzinfo=datetime.timezone.utc))),
                ("reviewed_at", models.DateTimeField(blank=True, null=True)),
            ],
            options={
                "indexes": [models.Index(fields=["due_at"], name="item_schedule_due_at_idx")],
            },
        ),
    ]
