from tortoise import fields, models


class KeyRingEntry(models.Model):
    """
    Signing key used to protect session cookies.
    - key_id: opaque identifier, carried in every cookie as the JWT "kid" header
    - application: identity that scopes the ring (deployments with different names never share keys)
    - key_material: Fernet token wrapping the raw key bytes (plain text never stored)
    - label: optional human-readable tag, not unique
    - activation_start / activation_end: issuance window; a null end means still active
    Rows are only ever inserted, retired (activation_end set) or pruned.
    """
    key_id = fields.CharField(max_length=64, pk=True)
    application = fields.CharField(max_length=128, index=True)
    key_material = fields.TextField()
    label = fields.CharField(max_length=128, null=True)

    created_at = fields.DatetimeField()
    activation_start = fields.DatetimeField()
    activation_end = fields.DatetimeField(null=True)

    class Meta:
        table = "key_ring"

    def __repr__(self) -> str:
        return f"<KeyRingEntry key_id={self.key_id} created_at={self.created_at.isoformat()}>"
