from django.urls import path
from . import views

app_name = "gitmirror"

urlpatterns = [
    path("mirror", views.mirror, name="mirror"),
]
