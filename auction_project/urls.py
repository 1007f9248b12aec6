# auction_project/urls.py
from django.contrib import admin
from django.urls import path, include


urlpatterns = [
    path('', include('auction.urls')),
    path('django-admin/', admin.site.urls),
]
