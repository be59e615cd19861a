from django.urls import path
from . import views

app_name = 'configuration'

urlpatterns = [
    # Public
    path('coffee-price/', views.coffee_price, name='coffee-price'),

    # Admin
    path('', views.settings_list, name='settings-list'),
    path('test-email/', views.test_email, name='test-email'),
    path('<str:key>/', views.setting_detail, name='setting-detail'),
]
