from django.urls import path

from . import views

app_name = "gadgets"

urlpatterns = [
    path("ajax-proxy/<path:path>", views.ajax_proxy, name="ajax_proxy"),
]
