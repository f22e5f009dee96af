from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='SequenceCounter',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=30, unique=True)),
                ('value', models.PositiveIntegerField(default=0)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
        ),
        migrations.CreateModel(
            name='ExamInvigilator',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('short_name', models.CharField(max_length=10, unique=True)),
                ('name', models.CharField(max_length=200)),
                ('mobile_no', models.CharField(max_length=10)),
                ('is_active', models.BooleanField(default=True)),
                ('is_deleted', models.BooleanField(default=False)),
                ('deleted_at', models.DateTimeField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('deleted_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to=settings.AUTH_USER_MODEL)),
            ],
        ),
        migrations.CreateModel(
            name='Student',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('registration_code', models.CharField(blank=True, max_length=50, null=True)),
                ('application_no', models.CharField(blank=True, max_length=50, null=True)),
                ('name', models.CharField(max_length=200)),
                ('gender', models.CharField(choices=[('Male', 'Male'), ('Female', 'Female'), ('Other', 'Other')], max_length=10)),
                ('father_name', models.CharField(max_length=200)),
                ('aadhaar_no', models.CharField(max_length=12)),
                ('school_name', models.CharField(max_length=255)),
                ('studying_class', models.CharField(choices=[('7', '7'), ('8', '8'), ('9', '9'), ('10', '10'), ('11', '11'), ('12', '12')], max_length=2)),
                ('medium', models.CharField(choices=[('English', 'English'), ('Malayalam', 'Malayalam'), ('Hindi', 'Hindi'), ('Other', 'Other')], max_length=20)),
                ('phone_no', models.CharField(db_index=True, max_length=10)),
                ('house_name', models.CharField(max_length=200)),
                ('place', models.CharField(max_length=200)),
                ('post_office', models.CharField(max_length=200)),
                ('pin_code', models.CharField(max_length=6)),
                ('local_body_type', models.CharField(choices=[('Municipality', 'Municipality'), ('Corporation', 'Corporation'), ('Panchayat', 'Panchayat')], max_length=20)),
                ('local_body_name', models.CharField(max_length=200)),
                ('village', models.CharField(max_length=200)),
                ('room_no', models.PositiveIntegerField(blank=True, null=True)),
                ('seat_no', models.PositiveSmallIntegerField(blank=True, null=True)),
                ('exam_marks', models.PositiveSmallIntegerField(default=0)),
                ('total_marks', models.PositiveSmallIntegerField(default=100)),
                ('result_status', models.CharField(choices=[('Pending', 'Pending'), ('Passed', 'Passed'), ('Failed', 'Failed')], default='Pending', max_length=10)),
                ('rank', models.PositiveIntegerField(default=0)),
                ('scholarship', models.CharField(blank=True, choices=[('', 'None'), ('Gold', 'Gold'), ('Silver', 'Silver'), ('Bronze', 'Bronze')], default='', max_length=10)),
                ('ias_coaching', models.BooleanField(default=False)),
                ('status', models.CharField(choices=[('Registered', 'Registered'), ('Exam Completed', 'Exam Completed'), ('Result Published', 'Result Published')], default='Registered', max_length=20)),
                ('is_deleted', models.BooleanField(default=False)),
                ('deleted_at', models.DateTimeField(blank=True, null=True)),
                ('delete_reason', models.CharField(blank=True, default='', max_length=255)),
                ('original_registration_code', models.CharField(blank=True, max_length=50, null=True)),
                ('original_application_no', models.CharField(blank=True, max_length=50, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('created_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='students_created', to=settings.AUTH_USER_MODEL)),
                ('deleted_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='students_deleted', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'indexes': [
                    models.Index(fields=['room_no', 'is_deleted'], name='student_room_active_idx'),
                    models.Index(fields=['is_deleted', 'created_at'], name='student_active_created_idx'),
                ],
                'constraints': [
                    models.UniqueConstraint(condition=models.Q(('is_deleted', False)), fields=('registration_code',), name='uniq_active_registration_code'),
                    models.UniqueConstraint(condition=models.Q(('is_deleted', False)), fields=('application_no',), name='uniq_active_application_no'),
                    models.UniqueConstraint(condition=models.Q(('is_deleted', False)), fields=('aadhaar_no',), name='uniq_active_aadhaar_no'),
                    models.UniqueConstraint(condition=models.Q(('is_deleted', False)), fields=('room_no', 'seat_no'), name='uniq_active_room_seat'),
                    models.CheckConstraint(condition=models.Q(('seat_no__isnull', True), models.Q(('seat_no__gte', 1), ('seat_no__lte', 20)), _connector='OR'), name='seat_no_within_room_capacity'),
                ],
            },
        ),
        migrations.CreateModel(
            name='InvigilatorDuty',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('exam_date', models.DateField()),
                ('duty_from', models.CharField(max_length=5)),
                ('duty_to', models.CharField(max_length=5)),
                ('room_no', models.PositiveIntegerField()),
                ('signature', models.TextField(blank=True, null=True)),
                ('signature_time', models.DateTimeField(blank=True, null=True)),
                ('status', models.CharField(choices=[('Assigned', 'Assigned'), ('Present', 'Present'), ('Absent', 'Absent')], default='Assigned', max_length=10)),
                ('batch_id', models.CharField(db_index=True, max_length=32)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('created_by', models.ForeignKey(null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='duties_created', to=settings.AUTH_USER_MODEL)),
                ('invigilator', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='duties', to='exam_api.examinvigilator')),
            ],
            options={
                'ordering': ['exam_date', 'room_no'],
                'indexes': [
                    models.Index(fields=['exam_date', 'status'], name='duty_date_status_idx'),
                ],
                'constraints': [
                    models.UniqueConstraint(fields=('exam_date', 'room_no'), name='uniq_duty_room_per_date'),
                    models.UniqueConstraint(fields=('exam_date', 'invigilator'), name='uniq_duty_invigilator_per_date'),
                ],
            },
        ),
        migrations.CreateModel(
            name='ExamResult',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('registration_code', models.CharField(max_length=50, unique=True)),
                ('exam_marks', models.PositiveSmallIntegerField()),
                ('total_marks', models.PositiveSmallIntegerField(default=100)),
                ('rank', models.PositiveIntegerField(default=0)),
                ('is_qualified', models.BooleanField(default=False)),
                ('scholarship_type', models.CharField(blank=True, default='', max_length=10)),
                ('ias_coaching', models.BooleanField(default=False)),
                ('published_at', models.DateTimeField()),
                ('student', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='results', to='exam_api.student')),
            ],
            options={
                'ordering': ['rank'],
            },
        ),
    ]
