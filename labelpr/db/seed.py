"""
Bundled sample data.
Used on first run and whenever the persisted store cannot be read.
"""

import copy

from labelpr.models import Contact, Metric, PlanTask, QuickLink, ReleasePlan, Store, Track

INITIAL_CONTACTS = [
    Contact(
        id='1',
        name='Алексей Ривера',
        category='Blogger',
        platform='Instagram',
        handle='@arivera_travel',
        reach='250k',
        contact_url='https://instagram.com/arivera_travel',
        notes='Тревел и лайфстайл. Высокая вовлеченность.',
        tags=['Путешествия', 'Люкс'],
    ),
    Contact(
        id='2',
        name='Луна Рэй',
        category='Artist',
        platform='Telegram',
        handle='lunaray_official',
        reach='1.2M ежемесячно',
        contact_url='https://t.me/lunaray_official',
        notes='Восходящая звезда инди-попа. Открыта к коллаборациям.',
        tags=['Музыка', 'Инди'],
    ),
]

INITIAL_PLATFORM_CONTACTS = [
    Contact(
        id='pc-1',
        name='Spotify for Artists',
        category='Platform Curator',
        platform='Spotify',
        handle='Editorial',
        reach='Весь мир',
        contact_url='https://artists.spotify.com/',
        notes='Прямой питчинг через дашборд Spotify for Artists.',
        tags=['Глобальный', 'Приоритет'],
        pitching_url='https://artists.spotify.com/c/pitch',
    ),
    Contact(
        id='pc-3',
        name='Яндекс Музыка',
        category='Platform Curator',
        platform='Yandex Music',
        handle='Редакция',
        reach='СНГ / Мир',
        contact_url='https://music.yandex.ru/artists',
        notes='Подача заявок в плейлисты и программу "Искра".',
        tags=['Мажор', 'СНГ'],
        pitching_url='https://yandex.ru/support/music/performers/pitching.html',
    ),
]

INITIAL_LABEL_ARTISTS = [
    Contact(
        id='la-1',
        name='Shadow Echo',
        category='Label Artist',
        platform='Universal',
        handle='@shadow_echo',
        reach='800k',
        contact_url='https://t.me/shadow_echo_mgmt',
        notes='Техно-проект. Контракт до 2026 года.',
        tags=['Techno', 'Mainstage'],
    ),
]

INITIAL_TRACKS = [
    Track(id='t1', title='Midnight Drive', artist_name='Shadow Echo', status='Released',
          release_date='2024-05-20', genre='Techno', isrc='RU-A12-24-00001'),
    Track(id='t2', title='Summer Breeze', artist_name='Mira Vane', status='In Progress',
          release_date='2024-08-15', genre='Pop', isrc='RU-A12-24-00002'),
]

INITIAL_RELEASE_PLANS = [
    ReleasePlan(
        id='rp1',
        title='Neon Nights (LP)',
        artist='Shadow Echo',
        date='2025-04-12',
        status='Pitching',
        tasks=[
            PlanTask(id='tsk1', label='Финальная обложка готова', completed=True),
            PlanTask(id='tsk2', label='Питчинг в Spotify отправлен', completed=True),
            PlanTask(id='tsk3', label='Пресс-кит разослан блогерам', completed=False),
            PlanTask(id='tsk4', label='ТикТок сниппет опубликован', completed=False),
        ],
    ),
]

INITIAL_METRICS = [
    Metric(id='m1', label='Слушатели в Spotify', value='1.24M', trend='up', trend_value='+12%',
           icon='fa-spotify', color='text-emerald-500'),
    Metric(id='m2', label='Сохранения треков', value='450K', trend='up', trend_value='+5%',
           icon='fa-heart', color='text-rose-500'),
    Metric(id='m3', label='Engagement Rate IG', value='4.8%', trend='down', trend_value='-0.2%',
           icon='fa-instagram', color='text-pink-500'),
    Metric(id='m4', label='Просмотры в TikTok', value='2.1M', trend='up', trend_value='+28%',
           icon='fa-tiktok', color='text-slate-800'),
]

INITIAL_LINKS = [
    QuickLink(id='1', title='Пресс-кит (EPK)', url='https://google.com', icon='fa-briefcase', color='bg-indigo-500'),
    QuickLink(id='2', title='Медиа-план', url='https://notion.so', icon='fa-calendar-check', color='bg-emerald-500'),
    QuickLink(id='3', title='Аналитика', url='https://analytics.google.com', icon='fa-chart-line', color='bg-blue-500'),
]

SEED = {
    'contacts': INITIAL_CONTACTS,
    'platform_contacts': INITIAL_PLATFORM_CONTACTS,
    'label_artists': INITIAL_LABEL_ARTISTS,
    'tracks': INITIAL_TRACKS,
    'release_plans': INITIAL_RELEASE_PLANS,
    'links': INITIAL_LINKS,
    'metrics': INITIAL_METRICS,
}


def seed_list(attr: str) -> list:
    """Fresh copy of the sample list for one Store attribute."""
    return copy.deepcopy(SEED[attr])


def seed_store() -> Store:
    """A Store filled with fresh copies of all sample data."""
    return Store(**{attr: seed_list(attr) for attr in SEED})
