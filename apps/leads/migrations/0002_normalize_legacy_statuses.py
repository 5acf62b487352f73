from django.db import migrations


# cold/warm/hot rows written before the lifecycle statuses existed
LEGACY_STATUS_MAP = {
    'cold': 'new',
    'warm': 'contacted',
    'hot': 'qualified',
}


def forwards(apps, schema_editor):
    Lead = apps.get_model('leads', 'Lead')
    for legacy, canonical in LEGACY_STATUS_MAP.items():
        Lead.objects.filter(status=legacy).update(status=canonical)


class Migration(migrations.Migration):

    dependencies = [
        ('leads', '0001_initial'),
    ]

    operations = [
        migrations.RunPython(forwards, migrations.RunPython.noop),
    ]
