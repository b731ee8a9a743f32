from rest_framework.permissions import BasePermission
from accounts.enums import UserRole


class CanViewAppointment(BasePermission):
    """
    Patient: own appointments.
    Doctor: appointments booked with them.
    Admin: everything.
    """
    def has_object_permission(self, request, view, obj):
        u = request.user
        if not u or not u.is_authenticated:
            return False
        if u.role == UserRole.ADMIN:
            return True
        if obj.patient_id == u.id:
            return True
        return u.role == UserRole.DOCTOR and obj.doctor.user_id == u.id
