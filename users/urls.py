"""
URL Configuration per l'app Users
"""

from django.urls import path

from . import views

app_name = "users"

urlpatterns = [
    # ========== AUTENTICAZIONE ==========
    path("", views.login_view, name="login"),
    path("login/", views.login_view, name="login_alias"),
    path("logout/", views.logout_view, name="logout"),
    # ========== CRUD USERS ==========
    path("users/", views.user_list_view, name="user_list"),
    path("users/create/", views.user_create_view, name="user_create"),
    path("users/<int:pk>/update/", views.user_update_view, name="user_update"),
    path(
        "users/<int:pk>/permissions/",
        views.user_permissions_manage_view,
        name="user_permissions_manage",
    ),
    # ========== PROFILO ==========
    path("profilo/", views.profilo_view, name="profilo"),
]
