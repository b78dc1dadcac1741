from django import forms
from django.contrib.auth import get_user_model, password_validation

from .models import Role

User = get_user_model()


class RegistrationForm(forms.Form):
    username = forms.CharField(max_length=150)
    email = forms.EmailField()
    password = forms.CharField(strip=False)
    full_name = forms.CharField(max_length=150, required=False)
    role = forms.ChoiceField(choices=Role.choices, initial=Role.TENANT)
    phone = forms.CharField(max_length=20, required=False)

    def clean_username(self):
        username = self.cleaned_data['username'].strip()
        if User.objects.filter(username__iexact=username).exists():
            raise forms.ValidationError('This username is already taken.')
        return username

    def clean_email(self):
        email = self.cleaned_data['email'].strip().lower()
        if User.objects.filter(email__iexact=email).exists():
            raise forms.ValidationError('An account with this email already exists.')
        return email

    def clean(self):
        cleaned = super().clean()
        password = cleaned.get('password')
        if password:
            candidate = User(username=cleaned.get('username', ''), email=cleaned.get('email', ''))
            try:
                password_validation.validate_password(password, candidate)
            except forms.ValidationError as exc:
                self.add_error('password', exc)
        return cleaned


class PasswordResetConfirmForm(forms.Form):
    uid = forms.CharField()
    token = forms.CharField()
    new_password = forms.CharField(strip=False)

    def clean_new_password(self):
        password = self.cleaned_data['new_password']
        password_validation.validate_password(password)
        return password
