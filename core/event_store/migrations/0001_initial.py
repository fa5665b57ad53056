import uuid

from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="PolicyEvent",
            fields=[
                ("event_id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("event_type", models.CharField(max_length=255)),
                ("project_id", models.BigIntegerField()),
                ("source_engine", models.CharField(max_length=100)),
                ("actor_id", models.CharField(max_length=255)),
                ("sequence", models.PositiveIntegerField()),
                ("payload", models.JSONField()),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("previous_event_hash", models.CharField(max_length=64)),
                ("event_hash", models.CharField(max_length=64)),
            ],
            options={
                "db_table": "btp_policy_event",
                "ordering": ["project_id", "sequence"],
            },
        ),
        migrations.AddConstraint(
            model_name="policyevent",
            constraint=models.UniqueConstraint(
                fields=("project_id", "sequence"),
                name="uq_evt_project_sequence",
            ),
        ),
        migrations.AddConstraint(
            model_name="policyevent",
            constraint=models.UniqueConstraint(
                fields=("project_id", "previous_event_hash"),
                name="uq_evt_project_prev_hash",
            ),
        ),
    ]
