"""Демо-ролики: отдаются, когда БД недоступна или таблицы reels ещё нет. id начинаются с demo-."""
import copy

DEMO_PREFIX = "demo-"

DEMO_USERS = [
    {"id": "11111111-1111-1111-1111-111111111111", "phone": "+79991234567", "name": "Иван", "surname": "Иванов",
     "bio": "Люблю путешествия и спорт", "gender": "male"},
    {"id": "22222222-2222-2222-2222-222222222222", "phone": "+79997654321", "name": "Анна", "surname": "Петрова",
     "bio": "Кофеман и дизайнер", "gender": "female"},
    {"id": "33333333-3333-3333-3333-333333333333", "phone": "+79995556677", "name": "Дмитрий", "surname": "Сидоров",
     "bio": "Фитнес тренер", "gender": "male"},
    {"id": "44444444-4444-4444-4444-444444444444", "phone": "+79998889900", "name": "Мария", "surname": "Козлова",
     "bio": "Художник и иллюстратор", "gender": "female"},
]

_SAMPLE = "https://commondatastorage.googleapis.com/gtv-videos-bucket/sample/"

# Отсортированы по created_at по убыванию, как обычная лента
DEMO_REELS = [
    {
        "id": "demo-1",
        "user_id": "44444444-4444-4444-4444-444444444444",
        "user_name": "Мария",
        "video_url": _SAMPLE + "ForBiggerEscapes.mp4",
        "video_filename": "digital-art.mp4",
        "caption": "Процесс создания цифрового арта ✨ #дизайн #арт",
        "music": "оригинальный звук",
        "likes_count": 23100,
        "views_count": 210000,
        "duration": 15,
        "created_at": "2024-05-04T12:00:00+00:00",
    },
    {
        "id": "demo-2",
        "user_id": "33333333-3333-3333-3333-333333333333",
        "user_name": "Дмитрий",
        "video_url": _SAMPLE + "ForBiggerBlazes.mp4",
        "video_filename": "workout-video.mp4",
        "caption": "Тренировка на свежем воздухе 💪 #спорт #здоровье",
        "music": "тренд • workout motivation",
        "likes_count": 15600,
        "views_count": 120000,
        "duration": 15,
        "created_at": "2024-05-03T12:00:00+00:00",
    },
    {
        "id": "demo-3",
        "user_id": "22222222-2222-2222-2222-222222222222",
        "user_name": "Анна",
        "video_url": _SAMPLE + "ElephantsDream.mp4",
        "video_filename": "elephants-dream.mp4",
        "caption": "Приготовление идеального кофе дома ☕ #кофе #рецепт",
        "music": "тренд • morning vibe",
        "likes_count": 8700,
        "views_count": 45000,
        "duration": 15,
        "created_at": "2024-05-02T12:00:00+00:00",
    },
    {
        "id": "demo-4",
        "user_id": "11111111-1111-1111-1111-111111111111",
        "user_name": "Иван",
        "video_url": _SAMPLE + "BigBuckBunny.mp4",
        "video_filename": "big-buck-bunny.mp4",
        "caption": "Удивительные горные пейзажи Норвегии #путешествия #норвегия",
        "music": "Эпичная музыка - Adventure",
        "likes_count": 12500,
        "views_count": 89000,
        "duration": 15,
        "created_at": "2024-05-01T12:00:00+00:00",
    },
]


def is_demo_id(reel_id):
    return str(reel_id or "").startswith(DEMO_PREFIX)


def _row(reel):
    row = copy.deepcopy(reel)
    row.update({
        "user_avatar": "👤",
        "video_size": None,
        "video_mime_type": "video/mp4",
        "thumbnail_url": None,
        "actual_likes": reel["likes_count"],
        "is_liked": False,
        "is_demo": True,
    })
    return row


def demo_reel(reel_id):
    for reel in DEMO_REELS:
        if reel["id"] == reel_id:
            return _row(reel)
    return None


def demo_feed(page, limit):
    start = (page - 1) * limit
    rows = [_row(r) for r in DEMO_REELS[start:start + limit]]
    return rows, {"page": page, "limit": limit, "total": len(DEMO_REELS)}
