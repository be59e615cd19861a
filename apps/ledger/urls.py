from django.urls import path
from . import views

app_name = 'ledger'

urlpatterns = [
    # Kiosk
    # GET/POST   /api/members/                - List / register
    # GET/DELETE /api/members/{id}/           - Detail / leave (soft delete)
    path('members/', views.member_list, name='member-list'),
    path('members/<int:pk>/', views.member_detail, name='member-detail'),
    path('members/<int:pk>/increment/', views.increment, name='member-increment'),
    path('members/<int:pk>/decrement/', views.decrement, name='member-decrement'),
    path('members/<int:pk>/pay/', views.pay, name='member-pay'),

    # Admin member management
    path('members/<int:pk>/restore/', views.restore, name='member-restore'),
    path('members/<int:pk>/permanent/', views.permanent_delete, name='member-permanent-delete'),
    path('members/<int:pk>/tab/', views.set_tab, name='member-tab'),
    path('members/<int:pk>/confirm-payment/', views.confirm, name='member-confirm-payment'),
    path('members/<int:pk>/balance/', views.balance, name='member-balance'),

    # Payments and reporting
    path('payments/', views.payment_list, name='payment-list'),
    path('payments/summary/', views.payment_summary, name='payment-summary'),
    path('export/csv/', views.export_csv_view, name='export-csv'),
    path('export/json/', views.export_json_view, name='export-json'),
]
