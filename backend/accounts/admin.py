from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin
from django.contrib.auth.forms import UserChangeForm, UserCreationForm
from accounts.models import User, UserImage


class AccountCreationForm(UserCreationForm):
    class Meta:
        model = User
        fields = ("email", "name", "latitude", "longitude")


class AccountChangeForm(UserChangeForm):
    class Meta:
        model = User
        fields = "__all__"


class UserImageInline(admin.TabularInline):
    model = UserImage
    extra = 0
    readonly_fields = ["created_at"]


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    """Admin panel for the email-identified User model"""

    form = AccountChangeForm
    add_form = AccountCreationForm

    list_display = [
        "email",
        "name",
        "latitude",
        "longitude",
        "is_active",
        "is_staff",
    ]

    list_filter = [
        "is_active",
        "is_staff",
        "date_joined",
    ]

    search_fields = [
        "email",
        "name",
    ]

    ordering = ("email",)

    inlines = [UserImageInline]

    fieldsets = (
        (None, {"fields": ("email", "password")}),
        ("Profile", {"fields": ("name", "latitude", "longitude")}),
        (
            "Permissions",
            {
                "fields": (
                    "is_active",
                    "is_staff",
                    "is_superuser",
                    "groups",
                    "user_permissions",
                )
            },
        ),
        ("Important dates", {"fields": ("last_login", "date_joined")}),
    )

    # For create user page in admin
    add_fieldsets = (
        (
            None,
            {
                "classes": ("wide",),
                "fields": (
                    "email",
                    "name",
                    "latitude",
                    "longitude",
                    "password1",
                    "password2",
                ),
            },
        ),
    )
