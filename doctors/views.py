from django.db.models import Q
from rest_framework import viewsets, mixins
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from accounts.enums import UserRole
from appointments.enums import ApptStatus
from .models import Doctor
from .serializers import DoctorSerializer


class DoctorViewSet(viewsets.GenericViewSet, mixins.ListModelMixin, mixins.RetrieveModelMixin):
    queryset = Doctor.objects.all()
    serializer_class = DoctorSerializer
    permission_classes = [IsAuthenticated]

    def get_queryset(self):
        q = self.queryset
        u = self.request.user

        # Admins see everything; others only approved doctors (+ their own profile)
        if u.role != UserRole.ADMIN:
            q = q.filter(Q(is_approved=True) | Q(user_id=u.id))

        specialization = self.request.query_params.get("specialization")
        s = self.request.query_params.get("s")
        if specialization:
            q = q.filter(specialization__iexact=specialization)
        if s:
            q = q.filter(Q(full_name__icontains=s) | Q(specialization__icontains=s))
        if self.request.query_params.get("featured") in ("true", "True", "1"):
            q = q.filter(is_featured=True)
        return q

    @action(detail=True, methods=["get"], url_path="booked-slots")
    def booked_slots(self, request, pk=None):
        """Times already taken on ?date=YYYY-MM-DD (cancelled appointments free their slot)."""
        doctor = self.get_object()
        day = request.query_params.get("date")
        if not day:
            return Response({"detail": "date is required"}, status=400)
        times = (
            doctor.appointments.filter(appointment_date=day)
            .exclude(status=ApptStatus.CANCELLED)
            .order_by("appointment_time")
            .values_list("appointment_time", flat=True)
        )
        return Response([t.strftime("%H:%M") for t in times])
