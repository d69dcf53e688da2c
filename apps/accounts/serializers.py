from rest_framework import serializers
from .models import User


class UserSerializer(serializers.ModelSerializer):
    """Login identity with the holder profile it is linked to."""

    holder = serializers.SerializerMethodField()

    class Meta:
        model = User
        fields = [
            'id',
            'email',
            'display_name',
            'role',
            'is_event_admin',
            'holder',
            'created_at',
            'last_login',
        ]
        read_only_fields = fields

    def get_holder(self, obj):
        participant = getattr(obj, 'participant', None)
        if participant is not None:
            return {
                'type': 'participant',
                'id': str(participant.pk),
                'name': participant.name,
                'is_family': participant.is_family,
                'family_size': participant.family_size,
            }

        company = getattr(obj, 'exhibitor', None)
        if company is not None:
            return {
                'type': 'exhibitor',
                'id': str(company.pk),
                'company_code': company.company_code,
                'company_name': company.company_name,
                'plan': company.plan,
            }
        return None


class UserLoginSerializer(serializers.Serializer):
    """Email, participant phone number or exhibitor company code, plus password."""

    identifier = serializers.CharField(max_length=254)
    password = serializers.CharField(
        write_only=True,
        style={'input_type': 'password'}
    )
