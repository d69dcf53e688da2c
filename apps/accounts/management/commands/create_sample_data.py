"""
Management command to create sample data for testing the API.

Usage:
    python manage.py create_sample_data
    python manage.py create_sample_data --clear --event-date 2025-10-03

This creates:
- 3 meal slots (Lunch Day 1, Gala Dinner Day 1, Lunch Day 2)
- 1 admin
- 3 participants (one registered as a family of 4), with coupons
- 3 exhibitor companies on different plans, with employees
"""

from datetime import date, timedelta

from django.core.management.base import BaseCommand, CommandError
from django.db import transaction

from apps.accounts.models import User, UserRole
from apps.coupons.models import Participant
from apps.coupons.services import create_participant, provision_coupons
from apps.exhibitors.models import ExhibitorCompany, ExhibitorPlan, AllocationClaim
from apps.exhibitors.services import add_employee, create_exhibitor
from apps.meals.models import MealSlot, MealType


class Command(BaseCommand):
    help = 'Create sample data for testing the API'

    def add_arguments(self, parser):
        parser.add_argument(
            '--clear',
            action='store_true',
            help='Clear existing data before creating new sample data',
        )
        parser.add_argument(
            '--event-date',
            default='2025-10-03',
            help='First day of the event (YYYY-MM-DD)',
        )

    @transaction.atomic
    def handle(self, *args, **options):
        try:
            event_date = date.fromisoformat(options['event_date'])
        except ValueError:
            raise CommandError('--event-date must be in YYYY-MM-DD format')

        if options['clear']:
            self.stdout.write('Clearing existing data...')
            self.clear_data()

        self.stdout.write('Creating sample data...')

        self.create_meal_slots(event_date)
        self.create_admin()
        self.create_participants()
        self.create_exhibitors()

        self.stdout.write(self.style.SUCCESS('Sample data created successfully!'))
        self.stdout.write('')
        self.stdout.write('Test accounts:')
        self.stdout.write('  admin@example.com / admin123 (admin)')
        self.stdout.write('  9000000001 / password123 (participant)')
        self.stdout.write('  9000000002 / password123 (participant, family of 4)')
        self.stdout.write('  EXH001 / password123 (exhibitor, diamond)')

    def clear_data(self):
        """Clear all data from the database."""
        AllocationClaim.objects.all().delete()
        ExhibitorCompany.objects.all().delete()
        Participant.objects.all().delete()
        MealSlot.objects.all().delete()
        User.objects.filter(is_superuser=False).delete()

    def create_meal_slots(self, event_date):
        """Create the event's meal slots."""
        self.stdout.write('  Creating meal slots...')

        slots_data = [
            {
                'slot_id': 'lunch_1',
                'name': 'Lunch - Day 1',
                'day': 1,
                'meal_type': MealType.LUNCH,
                'start_time': '12:00',
                'end_time': '14:00',
                'event_date': event_date,
            },
            {
                'slot_id': 'gala_1',
                'name': 'Gala Dinner - Day 1',
                'day': 1,
                'meal_type': MealType.DINNER,
                'start_time': '19:00',
                'end_time': '22:00',
                'event_date': event_date,
            },
            {
                'slot_id': 'lunch_2',
                'name': 'Lunch - Day 2',
                'day': 2,
                'meal_type': MealType.LUNCH,
                'start_time': '12:00',
                'end_time': '14:00',
                'event_date': event_date + timedelta(days=1),
            },
        ]

        slots = []
        for data in slots_data:
            slot, created = MealSlot.objects.update_or_create(
                slot_id=data['slot_id'],
                defaults=data,
            )
            slots.append(slot)
            if created:
                self.stdout.write(f'    Created slot: {slot.name}')
        return slots

    def create_admin(self):
        self.stdout.write('  Creating admin...')
        admin, created = User.objects.get_or_create(
            email='admin@example.com',
            defaults={
                'display_name': 'Event Admin',
                'role': UserRole.ADMIN,
                'is_staff': True,
                'is_superuser': True,
            }
        )
        if created:
            admin.set_password('admin123')
            admin.save()
        return admin

    def create_participants(self):
        """Create participants and provision their coupons."""
        self.stdout.write('  Creating participants...')

        participants_data = [
            {'email': 'asha@example.com', 'name': 'Asha Menon', 'phone_number': '9000000001', 'family_size': 1},
            {'email': 'rahul@example.com', 'name': 'Rahul Nair', 'phone_number': '9000000002', 'family_size': 4},
            {'email': 'meera@example.com', 'name': 'Meera Iyer', 'phone_number': '9000000003', 'family_size': 1},
        ]

        participants = []
        for data in participants_data:
            existing = Participant.objects.filter(phone_number=data['phone_number']).first()
            if existing:
                # Re-running picks up any newly added slots
                provision_coupons(participant=existing)
                participants.append(existing)
                continue

            participant = create_participant(password='password123', **data)
            participants.append(participant)
            self.stdout.write(
                f'    Created participant: {participant.name} '
                f'({participant.coupons.count()} coupons)'
            )
        return participants

    def create_exhibitors(self):
        """Create exhibitor companies with employees."""
        self.stdout.write('  Creating exhibitors...')

        companies_data = [
            {
                'email': 'medtech@example.com',
                'company_code': 'EXH001',
                'company_name': 'MedTech Solutions',
                'phone_number': '9100000001',
                'plan': ExhibitorPlan.DIAMOND,
                'employees': [('Kiran Das', '9100000011'), ('Priya Shah', '9100000012')],
            },
            {
                'email': 'pharmacare@example.com',
                'company_code': 'EXH002',
                'company_name': 'PharmaCare',
                'phone_number': '9100000002',
                'plan': ExhibitorPlan.GOLD,
                'employees': [('Vikram Rao', '9100000021')],
            },
            {
                'email': 'surgitools@example.com',
                'company_code': 'EXH003',
                'company_name': 'SurgiTools',
                'phone_number': '9100000003',
                'plan': ExhibitorPlan.SILVER,
                'employees': [('Anita Paul', '9100000031')],
            },
        ]

        companies = []
        for data in companies_data:
            if ExhibitorCompany.objects.filter(company_code=data['company_code']).exists():
                continue

            company = create_exhibitor(
                email=data['email'],
                password='password123',
                company_code=data['company_code'],
                company_name=data['company_name'],
                phone_number=data['phone_number'],
                plan=data['plan'],
            )
            for name, phone in data['employees']:
                add_employee(company=company, employee_name=name, employee_phone=phone)

            companies.append(company)
            self.stdout.write(f'    Created exhibitor: {company}')
        return companies
