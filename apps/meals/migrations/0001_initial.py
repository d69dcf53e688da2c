# Generated manually for meal pass catalog

import django.core.validators
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='MealSlot',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('slot_id', models.CharField(db_index=True, max_length=32, unique=True)),
                ('name', models.CharField(max_length=100)),
                ('day', models.PositiveSmallIntegerField(validators=[django.core.validators.MinValueValidator(1)])),
                ('meal_type', models.CharField(choices=[('lunch', 'Lunch'), ('dinner', 'Dinner')], max_length=10)),
                ('start_time', models.CharField(max_length=5, validators=[django.core.validators.RegexValidator(message='Time must be in HH:MM format (00:00-24:00).', regex='^([01]\\d|2[0-3]):[0-5]\\d$|^24:00$')])),
                ('end_time', models.CharField(max_length=5, validators=[django.core.validators.RegexValidator(message='Time must be in HH:MM format (00:00-24:00).', regex='^([01]\\d|2[0-3]):[0-5]\\d$|^24:00$')])),
                ('event_date', models.DateField()),
            ],
            options={
                'db_table': 'meal_slots',
                'ordering': ['event_date', 'start_time', 'slot_id'],
            },
        ),
    ]
