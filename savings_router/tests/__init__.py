import os
import django

# Configure Django settings before any tests are run
os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'savings_router.tests.test_settings')
django.setup()

# python -m pytest savings_router/tests/
