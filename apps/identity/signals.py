from django.contrib.auth.signals import user_logged_in
from django.dispatch import receiver

from apps.audit.audit_service import AuditAction, log_action


def _client_details(request):
    if request is None:
        return {}
    forwarded = request.META.get('HTTP_X_FORWARDED_FOR', '')
    return {
        "ip": forwarded.split(',')[0].strip() or request.META.get('REMOTE_ADDR'),
        "user_agent": request.META.get('HTTP_USER_AGENT', '')[:255],
    }


@receiver(user_logged_in)
def audit_login(sender, user, request=None, **kwargs):
    """Password logins and test-client force_login both land here."""
    log_action(
        action=AuditAction.USER_LOGIN,
        target_type="User",
        target_id=user.id,
        target_label=user.email or user.username,
        performed_by=user,
        context={"role": user.role, **_client_details(request)},
    )
