from django.db import migrations, models


class Migration(migrations.Migration):

    dependencies = [
        ("quiz", "0001_initial"),
    ]

    operations = [
        migrations.AddField(
            model_name="user",
            name="streak_decayed_at",
            field=models.DateTimeField(blank=True, null=True),
        ),
    ]
