"""
Reports app URL configuration.

Included twice in ``participium/urls.py``::

    path('api/reports/', include('reports.urls'))
    path('api/categories/', CategoryListView.as_view())

Endpoint summary
----------------
GET  /api/reports/?status=<s>               — Reports in a status (reviewers).
POST /api/reports/                          — Submit a report (citizens).
GET  /api/reports/mine/                     — My reports.
GET  /api/reports/assigned/                 — Reports assigned to me (staff).
GET  /api/reports/co-assigned/              — Reports co-assigned to me (maintainers).
GET  /api/reports/map/                      — Approved reports for the public map.
GET  /api/reports/{id}/                     — Report detail (creator).
PUT  /api/reports/{id}/category/            — Change category (reviewers).
PUT  /api/reports/{id}/review/              — Accept / reject (reviewers).
PUT  /api/reports/{id}/status/              — Work status update (assignee).
PUT  /api/reports/{id}/assign-external/     — Co-assign a maintainer (assignee).
"""

from django.urls import include, path
from rest_framework.routers import SimpleRouter

from . import views

app_name = "reports"

router = SimpleRouter()
router.register(
    prefix=r"",
    viewset=views.ReportViewSet,
    basename="report",
)

urlpatterns = [
    path("", include(router.urls)),
]
