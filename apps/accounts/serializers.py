from rest_framework import serializers


class UserWithRoleSerializer(serializers.Serializer):
    """Read-only shape of a profile joined with its role (see UserService.list_users)"""

    id = serializers.UUIDField(read_only=True)
    email = serializers.EmailField(read_only=True)
    full_name = serializers.CharField(read_only=True, allow_null=True)
    avatar_url = serializers.CharField(read_only=True, allow_null=True)
    created_at = serializers.DateTimeField(read_only=True)
    role = serializers.CharField(read_only=True)
