from django.urls import path
from . import views

app_name = "tiddlers"

urlpatterns = [
    path("status", views.server_status, name="status"),
    path("tiddlers.json", views.tiddler_list, name="list"),
    path("tiddlers/<path:title>", views.tiddler, name="tiddler"),
    # TiddlyWeb adaptor routes: a single recipe over a single bag.
    path("recipes/<str:recipe>/tiddlers.json", views.tiddler_list, name="recipe-list"),
    path("recipes/<str:recipe>/tiddlers/<path:title>", views.recipe_tiddler, name="recipe-tiddler"),
    path("bags/<str:bag>/tiddlers/<path:title>", views.bag_tiddler, name="bag-tiddler"),
]
