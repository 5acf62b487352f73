from django import forms
from django.utils.translation import gettext_lazy as _
from crispy_forms.helper import FormHelper
from crispy_forms.layout import Layout, Fieldset, Submit, Div, Field, HTML
from crispy_forms.bootstrap import FormActions

from .models import ROLE_CHOICES, ROLE_USER, UserProfile


MIN_PASSWORD_LENGTH = 6


# LOGIN FORM
class LoginForm(forms.Form):
    email = forms.EmailField(
        label=_('Email Address'),
        max_length=255,
        required=True,
        widget=forms.EmailInput(attrs={
            'class': 'form-control',
            'placeholder': _('you@example.com'),
            'autofocus': True,
        })
    )

    password = forms.CharField(
        label=_('Password'),
        required=True,
        widget=forms.PasswordInput(attrs={
            'class': 'form-control',
            'placeholder': _('Enter your password'),
        })
    )

    def __init__(self, *args, **kwargs):

        super().__init__(*args, **kwargs)

        self.helper = FormHelper()
        self.helper.form_method = 'post'

        self.helper.layout = Layout(
            Field('email', css_class='mb-3'),
            Field('password', css_class='mb-3'),
            FormActions(
                Submit('submit', _('Sign In'), css_class='btn btn-primary w-100')
            )
        )

    def clean_email(self):

        email = self.cleaned_data.get('email', '')
        return email.lower().strip()


# USER CREATE FORM
class CreateUserForm(forms.Form):
    """
    New account request, checked before anything is sent to provisioning

    Errors are attached to the offending field so they render inline.
    """

    full_name = forms.CharField(
        label=_('Full Name'),
        max_length=150,
        required=True,
        error_messages={'required': _('Full name is required')},
        widget=forms.TextInput(attrs={'class': 'form-control', 'placeholder': _('John Doe')})
    )

    email = forms.EmailField(
        label=_('Email'),
        required=True,
        error_messages={'invalid': _('Please enter a valid email address'), 'required': _('Please enter a valid email address')},
        widget=forms.EmailInput(attrs={'class': 'form-control', 'placeholder': _('user@example.com')})
    )

    password = forms.CharField(
        label=_('Password'),
        required=True,
        widget=forms.PasswordInput(attrs={'class': 'form-control'})
    )

    confirm_password = forms.CharField(
        label=_('Confirm Password'),
        required=True,
        widget=forms.PasswordInput(attrs={'class': 'form-control'})
    )

    role = forms.ChoiceField(
        label=_('Role'),
        choices=ROLE_CHOICES,
        initial=ROLE_USER,
        widget=forms.Select(attrs={'class': 'form-select'})
    )

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)

        self.helper = FormHelper()
        self.helper.form_method = 'post'

        self.helper.layout = Layout(
            Fieldset(
                _('Account'),
                'full_name',
                'email',
                Div(
                    Div('password', css_class='col-md-6'),
                    Div('confirm_password', css_class='col-md-6'),
                    css_class='row'
                ),
                'role',
            ),
            FormActions(
                Submit('submit', _('Create User'), css_class='btn btn-primary'),
                HTML('<a href="{% url \'accounts:user_list\' %}" class="btn btn-secondary">Cancel</a>'),
            )
        )

    def clean_email(self):
        return self.cleaned_data.get('email', '').lower().strip()

    def clean_full_name(self):
        full_name = self.cleaned_data.get('full_name', '').strip()
        if not full_name:
            raise forms.ValidationError(_('Full name is required'))
        return full_name

    def clean_password(self):
        password = self.cleaned_data.get('password', '')
        if len(password) < MIN_PASSWORD_LENGTH:
            raise forms.ValidationError(
                _('Password must be at least %(min)d characters') % {'min': MIN_PASSWORD_LENGTH}
            )
        return password

    def clean(self):
        cleaned_data = super().clean()
        password = cleaned_data.get('password')
        confirm_password = cleaned_data.get('confirm_password')

        if password and confirm_password and password != confirm_password:
            self.add_error('confirm_password', _("Passwords don't match"))

        return cleaned_data


class RoleUpdateForm(forms.Form):
    role = forms.ChoiceField(choices=ROLE_CHOICES, label=_('Role'), widget=forms.Select(attrs={'class': 'form-select'}))


# USER PROFILE FORM
class UserProfileForm(forms.ModelForm):

    class Meta:
        model = UserProfile
        fields = ['full_name', 'avatar_url']

        widgets = {
            'full_name': forms.TextInput(attrs={
                'class': 'form-control',
                'placeholder': _('Your name'),
            }),
            'avatar_url': forms.URLInput(attrs={
                'class': 'form-control',
                'placeholder': _('https://...'),
            }),
        }

        labels = {
            'full_name': _('Full Name'),
            'avatar_url': _('Avatar URL'),
        }

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)

        self.helper = FormHelper()
        self.helper.form_method = 'post'
        self.helper.layout = Layout(
            'full_name',
            'avatar_url',
            FormActions(Submit('submit', _('Save'), css_class='btn btn-primary')),
        )
