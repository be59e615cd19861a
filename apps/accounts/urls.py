from django.urls import path
from . import views

app_name = 'accounts'

urlpatterns = [
    # Authentication
    path('login/', views.login, name='login'),
    path('me/', views.get_current_user, name='current-user'),

    # Admin account management
    path('admins/', views.admin_list, name='admin-list'),
    path('admins/<int:pk>/password/', views.change_password, name='admin-password'),
    path('admins/<int:pk>/', views.remove_admin, name='admin-delete'),
]
