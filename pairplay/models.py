from tortoise import fields
from tortoise.models import Model
import uuid

from .constants import INITIAL_PET, INITIAL_SUNFLOWER


def _initial_pet():
    return dict(INITIAL_PET)


def _initial_sunflower():
    return dict(INITIAL_SUNFLOWER)


class User(Model):
    """Account record; the playground only reads it through the profile lookup."""

    id = fields.UUIDField(pk=True, default=uuid.uuid4)
    username = fields.CharField(max_length=50, unique=True, index=True)
    password_hash = fields.CharField(max_length=128)
    display_name = fields.CharField(max_length=100)
    # "Male" | "Female" | None; selects the avatar sprite in the playground
    gender = fields.CharField(max_length=10, null=True)
    partner_id = fields.UUIDField(null=True)
    # the space this user currently reads and writes; a partner's space once linked
    space_id = fields.UUIDField(null=True)
    # at most one pending partner invitation, stored on the receiver
    pending_invite_from = fields.UUIDField(null=True)
    pending_invite_name = fields.CharField(max_length=50, null=True)
    pending_invite_at = fields.DatetimeField(null=True)
    created_at = fields.DatetimeField(auto_now_add=True)
    last_active = fields.DatetimeField(null=True)

    class Meta:
        table = "users"


class Space(Model):
    """Shared notes, photos, dates and companions of one user or one couple."""

    id = fields.UUIDField(pk=True, default=uuid.uuid4)
    owner_id = fields.UUIDField(index=True)
    notes = fields.JSONField(default=list)
    images = fields.JSONField(default=list)
    dates = fields.JSONField(default=list)
    pet = fields.JSONField(default=_initial_pet)
    sunflower = fields.JSONField(default=_initial_sunflower)
    updated_at = fields.DatetimeField(auto_now=True)

    class Meta:
        table = "spaces"
