import django.db.models.deletion
import django.utils.timezone
import uuid
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Lead',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('full_name', models.CharField(blank=True, help_text="Lead's full name", max_length=200, null=True)),
                ('phone_number', models.CharField(blank=True, db_index=True, help_text='Phone number (e.g. +91 9876543210)', max_length=20, null=True)),
                ('post_code', models.CharField(blank=True, help_text='Post code of the customer', max_length=12, null=True)),
                ('bike_model', models.CharField(blank=True, help_text='Bike model the lead is interested in', max_length=100, null=True)),
                ('purchase_timeline', models.CharField(blank=True, help_text='When the lead plans to buy', max_length=50, null=True)),
                ('source', models.CharField(blank=True, help_text='Where did this lead come from?', max_length=100, null=True)),
                ('lead_time', models.CharField(blank=True, help_text='Time the enquiry was received, as reported by the source', max_length=100, null=True)),
                ('status', models.CharField(choices=[('new', 'New'), ('contacted', 'Contacted'), ('qualified', 'Qualified'), ('converted', 'Converted'), ('lost', 'Lost')], db_index=True, default='new', help_text='Current lifecycle status', max_length=20)),
                ('next_followup_date', models.DateField(blank=True, db_index=True, help_text='When is the next follow-up scheduled?', null=True)),
                ('followup_note', models.TextField(blank=True, help_text='What needs to be done on follow-up', null=True)),
                ('notes', models.TextField(blank=True, help_text='General notes about this lead', null=True)),
                ('created_at', models.DateTimeField(db_index=True, default=django.utils.timezone.now, help_text='When was this lead created')),
                ('assigned_to', models.ForeignKey(blank=True, help_text='Salesperson responsible for this lead', null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='assigned_leads', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'verbose_name': 'Lead',
                'verbose_name_plural': 'Leads',
                'ordering': ['-created_at'],
                'indexes': [models.Index(fields=['assigned_to', 'status'], name='leads_assignee_status_idx')],
            },
        ),
        migrations.CreateModel(
            name='LeadActivity',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('activity_type', models.CharField(choices=[('status_change', 'Status Change'), ('followup_scheduled', 'Follow-up Scheduled'), ('note_added', 'Note Added'), ('converted', 'Converted'), ('lost', 'Lost')], help_text='Type of activity', max_length=30)),
                ('activity_text', models.TextField(help_text='Human-readable description of what happened')),
                ('created_at', models.DateTimeField(db_index=True, default=django.utils.timezone.now, help_text='When did this activity occur')),
                ('created_by', models.ForeignKey(blank=True, help_text='Who performed this action', null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='lead_activities', to=settings.AUTH_USER_MODEL)),
                ('lead', models.ForeignKey(help_text='Which lead this activity is for', on_delete=django.db.models.deletion.CASCADE, related_name='activities', to='leads.lead')),
            ],
            options={
                'verbose_name': 'Lead Activity',
                'verbose_name_plural': 'Lead Activities',
                'ordering': ['-created_at'],
                'indexes': [models.Index(fields=['lead', '-created_at'], name='leads_activity_lead_idx')],
            },
        ),
    ]
