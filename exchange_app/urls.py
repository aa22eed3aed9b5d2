from django.contrib.auth import views as auth_views
from django.urls import path

from . import views

app_name = "exchange_app"

urlpatterns = [
    path("", views.home, name="home"),
    path("objets/", views.offer_list, {"offer_type": "objet"}, name="objets"),
    path("services/", views.offer_list, {"offer_type": "service"}, name="services"),
    path(
        "connaissances/",
        views.offer_list,
        {"offer_type": "connaissance"},
        name="connaissances",
    ),
    path("offre/<int:offer_id>/", views.offer_detail, name="offer_detail"),
    path("api/delete-offer/<int:offer_id>/", views.delete_offer, name="delete_offer"),
    path(
        "auth/signin/",
        auth_views.LoginView.as_view(template_name="registration/login.html"),
        name="signin",
    ),
    path("auth/signout/", auth_views.LogoutView.as_view(), name="signout"),
]
