"""
Celery Configuration - Gestione Eventi

Configurazione Celery per tasks asincroni (invio inviti in blocco).
"""

import os
from celery import Celery

# Set default Django settings module
os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'config.settings.development')

app = Celery('gestione_eventi')

# Using a string here means the worker doesn't have to serialize
# the configuration object to child processes.
app.config_from_object('django.conf:settings', namespace='CELERY')

# Load task modules from all registered Django app configs.
app.autodiscover_tasks()

# Timezone
app.conf.timezone = 'Europe/Rome'
