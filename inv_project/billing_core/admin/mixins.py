from django.contrib import messages


class TenantAdminMixin:
    """
    Enforce tenant isolation in Django admin.
    Every billing row carries an `owner` (the signed-in user);
    staff only ever see and pick their own rows.
    """

    owner_field = "owner"

    def get_queryset(self, request):
        qs = super().get_queryset(request)
        # superusers see every owner's books
        if request.user.is_superuser:
            return qs
        return qs.filter(**{self.owner_field: request.user})

    def formfield_for_foreignkey(self, db_field, request, **kwargs):
        """
        Restrict FK dropdowns (company, inventory item, invoice)
        to rows owned by the current user.
        """
        rel_model = getattr(db_field, "related_model", None)
        if not request.user.is_superuser and rel_model is not None:
            if db_field.name == "owner":
                kwargs["queryset"] = rel_model.objects.filter(pk=request.user.pk)
            elif any(f.name == "owner" for f in rel_model._meta.fields):
                kwargs["queryset"] = rel_model.objects.filter(owner=request.user)
        return super().formfield_for_foreignkey(db_field, request, **kwargs)

    def save_model(self, request, obj, form, change):
        # new rows always belong to whoever created them (unless superuser)
        if not change and not request.user.is_superuser:
            obj.owner = request.user
        super().save_model(request, obj, form, change)

    def _report(self, request, done, total, verb):
        self.message_user(
            request,
            f"{verb} {done} of {total} selected.",
            level=messages.SUCCESS if done == total else messages.WARNING,
        )
