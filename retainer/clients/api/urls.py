from django.urls import path

from retainer.clients.api.views import ClientActivityView
from retainer.clients.api.views import ClientAdminView
from retainer.clients.api.views import ClientCreateView
from retainer.clients.api.views import ClientDetailsView
from retainer.clients.api.views import ClientPublicView
from retainer.clients.api.views import ClientRefillView
from retainer.clients.api.views import ClientStatusView
from retainer.clients.api.views import WorkLogCreateView
from retainer.clients.api.views import WorkLogDetailView

app_name = "clients"

# Fixed paths come before ``clients/<slug>/`` so they are never read as slugs.
urlpatterns = [
    path("clients/", ClientCreateView.as_view(), name="client-create"),
    path("clients/admin/", ClientAdminView.as_view(), name="client-admin"),
    path("clients/status/", ClientStatusView.as_view(), name="client-status"),
    path("clients/details/", ClientDetailsView.as_view(), name="client-details"),
    path("clients/refill/", ClientRefillView.as_view(), name="client-refill"),
    path("clients/activity/", ClientActivityView.as_view(), name="client-activity"),
    path("clients/<slug:slug>/", ClientPublicView.as_view(), name="client-public"),
    path("logs/", WorkLogCreateView.as_view(), name="log-create"),
    path("logs/<uuid:log_id>/", WorkLogDetailView.as_view(), name="log-detail"),
]
