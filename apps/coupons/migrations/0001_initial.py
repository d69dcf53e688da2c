# Generated manually for meal pass coupons

import django.core.validators
import django.db.models.deletion
import uuid
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
        ('meals', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='Participant',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('name', models.CharField(max_length=200)),
                ('phone_number', models.CharField(db_index=True, max_length=20, unique=True)),
                ('is_family', models.BooleanField(default=False)),
                ('family_size', models.PositiveSmallIntegerField(default=1, validators=[django.core.validators.MinValueValidator(1), django.core.validators.MaxValueValidator(4)])),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('user', models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name='participant', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'participants',
                'ordering': ['name'],
            },
        ),
        migrations.CreateModel(
            name='Coupon',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('unique_id', models.CharField(db_index=True, editable=False, max_length=120, unique=True)),
                ('family_member_index', models.PositiveSmallIntegerField(default=0)),
                ('status', models.CharField(choices=[('available', 'Available'), ('active', 'Active'), ('used', 'Used')], default='available', max_length=20)),
                ('claimed_at', models.DateTimeField(blank=True, null=True)),
                ('expires_at', models.DateTimeField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('participant', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='coupons', to='coupons.participant')),
                ('meal_slot', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='coupons', to='meals.mealslot')),
            ],
            options={
                'db_table': 'coupons',
                'ordering': ['meal_slot__event_date', 'meal_slot__start_time', 'family_member_index'],
            },
        ),
        migrations.AddIndex(
            model_name='coupon',
            index=models.Index(fields=['participant', 'status'], name='coupons_holder_status_idx'),
        ),
        migrations.AddIndex(
            model_name='coupon',
            index=models.Index(fields=['status', 'expires_at'], name='coupons_status_expiry_idx'),
        ),
        migrations.AddConstraint(
            model_name='coupon',
            constraint=models.UniqueConstraint(fields=('participant', 'meal_slot', 'family_member_index'), name='uniq_coupon_holder_slot_member'),
        ),
    ]
