from datetime import timedelta
from django.utils import timezone
from django.core.management.base import BaseCommand
from django.contrib.auth import get_user_model
from apps.identity.models import UserRole
from apps.mentoring.models import CoachMenteeAssignment
from apps.tracker.models import JobApplication, ApplicationStatus
from apps.courses.models import CourseProgress, STANDARD_COURSE_MODULES
from apps.todos.models import CoachTodo, TodoAssignment, PersonalTodo, TodoPriority, TodoStatus
from apps.scheduling.models import CoachingSession, SessionStatus
from apps.recommendations.models import JobRecommendation
from apps.recommendations.services import week_start
from apps.messaging.models import Conversation, Message, SenderType

User = get_user_model()


class Command(BaseCommand):
    help = 'Seeds the database with sample coaching data for testing.'

    def add_arguments(self, parser):
        parser.add_argument(
            '--clean',
            action='store_true',
            help='Delete existing data before seeding',
        )
        parser.add_argument(
            '--users',
            action='store_true',
            help='Seed users and assignments only',
        )
        parser.add_argument(
            '--tracker',
            action='store_true',
            help='Seed job applications and course progress only',
        )
        parser.add_argument(
            '--todos',
            action='store_true',
            help='Seed todos only',
        )
        parser.add_argument(
            '--sessions',
            action='store_true',
            help='Seed coaching sessions only',
        )

    def handle(self, *args, **options):
        seed_all = not any([
            options['users'], options['tracker'],
            options['todos'], options['sessions'],
        ])

        if options['clean']:
            self.stdout.write(self.style.WARNING('Cleaning database...'))
            self._clean_database()
            self.stdout.write(self.style.SUCCESS('Database cleaned.'))

        # Everything else hangs off the coach and the mentees
        coach, mentees = self._seed_users()

        if seed_all or options['tracker']:
            self._seed_tracker(mentees)
            self._seed_courses(mentees)
            self._seed_recommendations(coach, mentees)

        if seed_all or options['todos']:
            self._seed_todos(coach, mentees)

        if seed_all or options['sessions']:
            self._seed_sessions(coach, mentees)
            self._seed_messages(coach, mentees)

        self.stdout.write(self.style.SUCCESS('Seeding completed successfully.'))

    def _clean_database(self):
        Message.objects.all().delete()
        Conversation.objects.all().delete()
        CoachingSession.objects.all().delete()
        TodoAssignment.objects.all().delete()
        CoachTodo.objects.all().delete()
        PersonalTodo.objects.all().delete()
        JobRecommendation.objects.all().delete()
        CourseProgress.objects.all().delete()
        JobApplication.objects.all().delete()
        CoachMenteeAssignment.objects.all().delete()
        User.objects.exclude(is_superuser=True).delete()

    def _user(self, username, role, first_name, last_name, **extra):
        user = User.objects.filter(username=username).first()
        if user:
            return user
        user = User.objects.create_user(
            username=username,
            email=f"{username}@example.com",
            password="password123",
            role=role,
            first_name=first_name,
            last_name=last_name,
            **extra
        )
        self.stdout.write(f' - Created {username} (password123)')
        return user

    def _seed_users(self):
        self.stdout.write('Seeding Users...')

        if not User.objects.filter(username="admin").exists():
            User.objects.create_superuser(
                username="admin",
                email="admin@example.com",
                password="password123",
                role=UserRole.ADMIN,
                first_name="Admin",
                last_name="User"
            )
            self.stdout.write(' - Created admin (password123)')

        coach = self._user("coach", UserRole.COACH, "Carla", "Coach", about="Career coach, ex-recruiter.")
        mentees = [
            self._user("mia", UserRole.MENTEE, "Mia", "Novak"),
            self._user("sam", UserRole.MENTEE, "Sam", "Okafor"),
        ]
        for mentee in mentees:
            CoachMenteeAssignment.objects.update_or_create(
                coach=coach, mentee=mentee, defaults={'is_active': True}
            )
        self.stdout.write(f' - Assigned {len(mentees)} mentees to {coach.username}')
        return coach, mentees

    def _seed_tracker(self, mentees):
        self.stdout.write('Seeding Job Applications...')
        today = timezone.localdate()
        samples = [
            ("Acme", "Backend Engineer", ApplicationStatus.APPLIED, 2),
            ("Globex", "Platform Engineer", ApplicationStatus.INTERVIEWED, 9),
            ("Initech", "Data Engineer", ApplicationStatus.REJECTED, 20),
        ]
        for mentee in mentees:
            for company, title, status, days_ago in samples:
                JobApplication.objects.get_or_create(
                    mentee=mentee,
                    company_name=company,
                    job_title=title,
                    defaults={
                        'date_applied': today - timedelta(days=days_ago),
                        'application_status': status,
                    }
                )
        self.stdout.write(f' - Created up to {len(samples) * len(mentees)} applications')

    def _seed_courses(self, mentees):
        self.stdout.write('Seeding Course Progress...')
        for offset, mentee in enumerate(mentees):
            for index, module in enumerate(STANDARD_COURSE_MODULES):
                percentage = max(0, 100 - (index + offset) * 30)
                CourseProgress.objects.get_or_create(
                    user=mentee,
                    module_title=module,
                    defaults={
                        'progress_percentage': percentage,
                        'completed': percentage >= 100,
                        'completed_at': timezone.now() if percentage >= 100 else None,
                    }
                )

    def _seed_recommendations(self, coach, mentees):
        self.stdout.write('Seeding Job Recommendations...')
        for mentee in mentees:
            JobRecommendation.objects.get_or_create(
                coach=coach,
                mentee=mentee,
                job_title="Site Reliability Engineer",
                company_name="Umbrella",
                defaults={
                    'job_link': "https://umbrella.example/careers/sre",
                    'week_start_date': week_start(),
                }
            )

    def _seed_todos(self, coach, mentees):
        self.stdout.write('Seeding Todos...')
        todo, _ = CoachTodo.objects.get_or_create(
            coach=coach,
            title="Rewrite your CV summary",
            defaults={
                'description': "Three lines, focused on impact.",
                'priority': TodoPriority.HIGH,
                'due_date': timezone.localdate() + timedelta(days=7),
            }
        )
        for mentee in mentees:
            TodoAssignment.objects.get_or_create(todo=todo, mentee=mentee, defaults={'coach': coach})
            PersonalTodo.objects.get_or_create(
                owner=mentee,
                title="Reach out to two former colleagues",
                defaults={'status': TodoStatus.IN_PROGRESS}
            )

    def _seed_sessions(self, coach, mentees):
        self.stdout.write('Seeding Sessions...')
        start = timezone.now().replace(hour=10, minute=0, second=0, microsecond=0) + timedelta(days=3)
        for index, mentee in enumerate(mentees):
            CoachingSession.objects.get_or_create(
                mentee=mentee,
                session_type="Interview Preparation",
                defaults={
                    'coach': coach,
                    'session_date': start + timedelta(hours=index * 2),
                    'status': SessionStatus.CONFIRMED,
                    'meeting_link': "https://meet.google.com/seeded",
                }
            )

    def _seed_messages(self, coach, mentees):
        self.stdout.write('Seeding Messages...')
        for mentee in mentees:
            conversation, created = Conversation.objects.get_or_create(
                mentee=mentee, coach=coach, defaults={'subject': "Welcome"}
            )
            if created:
                Message.objects.create(
                    conversation=conversation,
                    sender=coach,
                    sender_type=SenderType.COACH,
                    content=f"Hi {mentee.first_name}, welcome aboard! Let's start with your CV.",
                )
