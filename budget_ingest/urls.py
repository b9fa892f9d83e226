"""budget ingest URL Configuration """

from django.urls import include, re_path
from rest_framework import routers

from . import api_views

router = routers.DefaultRouter()
router.register(r'budgets', api_views.ProjectBudgetViewSet)

urlpatterns = [
    re_path(r'^api/compute/?$', api_views.compute, name='compute'),
    re_path(r'^api/import/small-works/?$', api_views.import_small_works, name='import-small-works'),
    re_path(r'^api/import/bundle/?$', api_views.import_bundle, name='import-bundle'),
    re_path(r'^api/', include(router.urls)),
]
