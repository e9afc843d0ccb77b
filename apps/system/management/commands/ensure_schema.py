from django.core.management.base import BaseCommand

from apps.system.schema import ensure_schema, seed_demo_data


class Command(BaseCommand):
    help = "Создать недостающие таблицы и колонки; --seed добавляет демо-пользователей и Reels"

    def add_arguments(self, parser):
        parser.add_argument("--database", default="default")
        parser.add_argument("--seed", action="store_true", help="заполнить демо-данными")

    def handle(self, *args, **options):
        using = options["database"]
        actions = ensure_schema(using)
        for action in actions:
            self.stdout.write(action)
        if not actions:
            self.stdout.write("Схема в порядке")
        if options["seed"]:
            users, reels = seed_demo_data(using)
            self.stdout.write(self.style.SUCCESS(f"Демо-данные: пользователей {users}, reels {reels}"))
