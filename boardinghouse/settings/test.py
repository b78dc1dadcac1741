import os

os.environ.setdefault('SECRET_KEY', 'test-secret-key')

from .base import *

DEBUG = False

DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': ':memory:',
    }
}

EMAIL_BACKEND = 'django.core.mail.backends.locmem.EmailBackend'
DEFAULT_FROM_EMAIL = 'no-reply@boardinghouse.test'

STORAGES = {
    'default': {'BACKEND': 'django.core.files.storage.FileSystemStorage'},
    'staticfiles': {'BACKEND': 'django.contrib.staticfiles.storage.StaticFilesStorage'},
}

PASSWORD_HASHERS = ['django.contrib.auth.hashers.MD5PasswordHasher']

AXES_ENABLED = False
AUTHENTICATION_BACKENDS = ['django.contrib.auth.backends.ModelBackend']

FRONTEND_URL = 'http://frontend.test'

VNP_TMN_CODE = 'TESTTMN1'
VNP_HASH_SECRET = 'TESTHASHSECRET'
VNP_URL = 'https://sandbox.vnpayment.vn/paymentv2/vpcpay.html'
VNP_RETURN_URL = 'http://testserver/api/payments/vnpay-return/'
VNP_API_URL = 'https://sandbox.vnpayment.vn/merchant_webapi/api/transaction'
