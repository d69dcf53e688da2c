# Generated manually for meal pass exhibitors

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
            name='ExhibitorCompany',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('company_code', models.CharField(db_index=True, max_length=20, unique=True)),
                ('company_name', models.CharField(max_length=200)),
                ('phone_number', models.CharField(blank=True, max_length=20)),
                ('plan', models.CharField(choices=[('diamond', 'Diamond'), ('platinum', 'Platinum'), ('gold', 'Gold'), ('silver', 'Silver')], max_length=20)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('user', models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name='exhibitor', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'exhibitor_companies',
                'verbose_name_plural': 'exhibitor companies',
                'ordering': ['company_name'],
            },
        ),
        migrations.CreateModel(
            name='ExhibitorEmployee',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('employee_name', models.CharField(max_length=200)),
                ('employee_phone', models.CharField(blank=True, max_length=20)),
                ('is_active', models.BooleanField(default=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('company', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='employees', to='exhibitors.exhibitorcompany')),
            ],
            options={
                'db_table': 'exhibitor_employees',
                'ordering': ['employee_name'],
            },
        ),
        migrations.CreateModel(
            name='AllocationClaim',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('meal_type', models.CharField(choices=[('lunch', 'Lunch'), ('dinner', 'Dinner')], max_length=10)),
                ('quantity', models.PositiveIntegerField(validators=[django.core.validators.MinValueValidator(1)])),
                ('claimed_at', models.DateTimeField()),
                ('expires_at', models.DateTimeField()),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('company', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='claims', to='exhibitors.exhibitorcompany')),
                ('employee', models.ForeignKey(null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='claims', to='exhibitors.exhibitoremployee')),
                ('meal_slot', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='allocation_claims', to='meals.mealslot')),
            ],
            options={
                'db_table': 'allocation_claims',
                'ordering': ['-claimed_at'],
            },
        ),
        migrations.AddIndex(
            model_name='exhibitoremployee',
            index=models.Index(fields=['company', 'is_active'], name='exh_employee_active_idx'),
        ),
        migrations.AddIndex(
            model_name='allocationclaim',
            index=models.Index(fields=['company', 'meal_type'], name='alloc_company_type_idx'),
        ),
        migrations.AddConstraint(
            model_name='allocationclaim',
            constraint=models.UniqueConstraint(fields=('company', 'meal_slot'), name='uniq_company_meal_slot_claim'),
        ),
    ]
