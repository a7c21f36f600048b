"""内置的推荐订阅目录."""

from dataclasses import dataclass


@dataclass(frozen=True)
class FeedInfo:
    """目录中的一个推荐 Feed."""

    title: str
    url: str
    category: str


DEFAULT_FEEDS: tuple[FeedInfo, ...] = (
    # 科技
    FeedInfo("Hacker News", "https://hnrss.org/frontpage", "Tech"),
    FeedInfo("The Verge", "https://www.theverge.com/rss/index.xml", "Tech"),
    FeedInfo("Ars Technica", "https://feeds.arstechnica.com/arstechnica/index", "Tech"),
    FeedInfo("TechCrunch", "https://techcrunch.com/feed/", "Tech"),
    FeedInfo("Wired", "https://www.wired.com/feed/rss", "Tech"),
    FeedInfo("Engadget", "https://www.engadget.com/rss.xml", "Tech"),
    FeedInfo("GitHub Blog", "https://github.blog/feed/", "Tech"),
    FeedInfo("MIT Technology Review", "https://www.technologyreview.com/feed/", "Tech"),
    FeedInfo("The Next Web", "https://thenextweb.com/feed/", "Tech"),
    FeedInfo("VentureBeat", "https://venturebeat.com/feed/", "Tech"),
    FeedInfo("Slashdot", "http://rss.slashdot.org/Slashdot/slashdotMain", "Tech"),

    # 国际新闻
    FeedInfo("BBC News", "https://feeds.bbci.co.uk/news/rss.xml", "News"),
    FeedInfo("Reuters", "https://www.reutersagency.com/feed/", "News"),
    FeedInfo("NPR News", "https://feeds.npr.org/1001/rss.xml", "News"),
    FeedInfo("The Guardian", "https://www.theguardian.com/world/rss", "News"),
    FeedInfo("Al Jazeera", "https://www.aljazeera.com/xml/rss/all.xml", "News"),
    FeedInfo("Associated Press", "https://apnews.com/index.rss", "News"),
    FeedInfo("CNN", "http://rss.cnn.com/rss/edition.rss", "News"),

    # 法国新闻
    FeedInfo("Le Monde", "https://www.lemonde.fr/rss/une.xml", "France"),
    FeedInfo(
        "Le Figaro",
        "https://www.lefigaro.fr/rss/figaro_actualites.xml",
        "France",
    ),
    FeedInfo(
        "Libération",
        "https://www.liberation.fr/arc/outboundfeeds/rss/?outputType=xml",
        "France",
    ),
    FeedInfo("France Info", "https://www.francetvinfo.fr/titres.rss", "France"),
    FeedInfo("20 Minutes", "https://www.20minutes.fr/feeds/rss-une.xml", "France"),
    FeedInfo(
        "L'Express",
        "https://www.lexpress.fr/arc/outboundfeeds/rss/alaune.xml",
        "France",
    ),
    FeedInfo("Le Point", "https://www.lepoint.fr/feed/", "France"),
    FeedInfo("L'Obs", "https://www.nouvelobs.com/rss.xml", "France"),
    FeedInfo("Marianne", "https://www.marianne.net/rss.xml", "France"),
    FeedInfo("Les Échos", "https://www.lesechos.fr/rss/all.xml", "France"),
    FeedInfo("Mediapart", "https://www.mediapart.fr/articles/feed", "France"),
    FeedInfo(
        "Courrier International",
        "https://www.courrierinternational.com/feed/all/rss.xml",
        "France",
    ),
    FeedInfo("Rue89", "https://www.nouvelobs.com/rue89/rss.xml", "France"),
    FeedInfo("France 24", "https://www.france24.com/fr/rss", "France"),
    FeedInfo("RFI", "https://www.rfi.fr/fr/rss", "France"),
    FeedInfo("L'Humanité", "https://www.humanite.fr/rss.xml", "France"),
    FeedInfo("La Croix", "https://www.la-croix.com/RSS/UNIVERS", "France"),

    # 法国科技
    FeedInfo("Numerama", "https://www.numerama.com/feed/", "France Tech"),
    FeedInfo("01net", "https://www.01net.com/rss/info/", "France Tech"),
    FeedInfo("Clubic", "https://www.clubic.com/feed/", "France Tech"),
    FeedInfo("Frandroid", "https://www.frandroid.com/feed", "France Tech"),
    FeedInfo("Journal du Geek", "https://www.journaldugeek.com/feed/", "France Tech"),
    FeedInfo("Les Numériques", "https://www.lesnumeriques.com/rss.xml", "France Tech"),
    FeedInfo("NextINpact", "https://www.nextinpact.com/rss/news.xml", "France Tech"),
    FeedInfo("Silicon.fr", "https://www.silicon.fr/feed", "France Tech"),
    FeedInfo("BDM", "https://www.blogdumoderateur.com/feed/", "France Tech"),
    FeedInfo("Korben", "https://korben.info/feed", "France Tech"),

    # 法国文化与生活
    FeedInfo("Télérama", "https://www.telerama.fr/rss.xml", "France Culture"),
    FeedInfo(
        "Les Inrockuptibles",
        "https://www.lesinrocks.com/feed/",
        "France Culture",
    ),
    FeedInfo("Première", "https://www.premiere.fr/rss", "France Culture"),
    FeedInfo("Allociné", "https://rss.allocine.fr/ac/cine/cine", "France Culture"),
    FeedInfo("Madmoizelle", "https://www.madmoizelle.com/feed/", "France Culture"),

    # 法国科学
    FeedInfo(
        "Futura Sciences",
        "https://www.futura-sciences.com/rss/actualites.xml",
        "France Science",
    ),
    FeedInfo(
        "Sciences et Avenir",
        "https://www.sciencesetavenir.fr/rss.xml",
        "France Science",
    ),
    FeedInfo(
        "Pour la Science",
        "https://www.pourlascience.fr/rss/actualites.xml",
        "France Science",
    ),
    FeedInfo("La Recherche", "https://www.larecherche.fr/feed", "France Science"),

    # 法国体育
    FeedInfo("L'Équipe", "https://www.lequipe.fr/rss/actu_rss.xml", "France Sports"),
    FeedInfo("So Foot", "https://www.sofoot.com/rss.xml", "France Sports"),
    FeedInfo("Le 10 Sport", "https://le10sport.com/rss", "France Sports"),

    # 科学
    FeedInfo("Nature", "https://www.nature.com/nature.rss", "Science"),
    FeedInfo("Science Daily", "https://www.sciencedaily.com/rss/all.xml", "Science"),
    FeedInfo("Phys.org", "https://phys.org/rss-feed/", "Science"),
    FeedInfo("New Scientist", "https://www.newscientist.com/feed/home/", "Science"),

    # Apple
    FeedInfo("Daring Fireball", "https://daringfireball.net/feeds/main", "Apple"),
    FeedInfo("Six Colors", "https://feedpress.me/sixcolors", "Apple"),
    FeedInfo("MacStories", "https://www.macstories.net/feed/", "Apple"),
    FeedInfo("9to5Mac", "https://9to5mac.com/feed/", "Apple"),
    FeedInfo("MacRumors", "https://feeds.macrumors.com/MacRumors-All", "Apple"),

    # 开发
    FeedInfo("Swift by Sundell", "https://www.swiftbysundell.com/rss", "Development"),
    FeedInfo("NSHipster", "https://nshipster.com/feed.xml", "Development"),
    FeedInfo(
        "Hacking with Swift",
        "https://www.hackingwithswift.com/articles/rss",
        "Development",
    ),
    FeedInfo("iOS Dev Weekly", "https://iosdevweekly.com/issues.rss", "Development"),

    # 商业
    FeedInfo("Financial Times", "https://www.ft.com/rss/home", "Business"),
    FeedInfo("Bloomberg", "https://feeds.bloomberg.com/markets/news.rss", "Business"),
    FeedInfo(
        "The Economist",
        "https://www.economist.com/feeds/print-sections/all/all.xml",
        "Business",
    ),

    # Reddit
    FeedInfo("r/worldnews", "https://www.reddit.com/r/worldnews/.rss", "Reddit"),
    FeedInfo("r/technology", "https://www.reddit.com/r/technology/.rss", "Reddit"),
    FeedInfo("r/programming", "https://www.reddit.com/r/programming/.rss", "Reddit"),
    FeedInfo("r/apple", "https://www.reddit.com/r/apple/.rss", "Reddit"),
    FeedInfo("r/science", "https://www.reddit.com/r/science/.rss", "Reddit"),

    # Mastodon
    FeedInfo("Mastodon (Trending)", "https://mastodon.social/explore.rss", "Mastodon"),
    FeedInfo("#technology", "https://mastodon.social/tags/technology.rss", "Mastodon"),
    FeedInfo("#opensource", "https://mastodon.social/tags/opensource.rss", "Mastodon"),

    # Lemmy
    FeedInfo("Lemmy World", "https://lemmy.world/feeds/all.xml", "Lemmy"),
    FeedInfo("c/technology", "https://lemmy.world/feeds/c/technology.xml", "Lemmy"),
    FeedInfo("c/programming", "https://lemmy.world/feeds/c/programming.xml", "Lemmy"),

    # 安全与隐私
    FeedInfo("Krebs on Security", "https://krebsonsecurity.com/feed/", "Security"),
    FeedInfo("Schneier on Security", "https://www.schneier.com/feed/atom/", "Security"),
    FeedInfo("Threatpost", "https://threatpost.com/feed/", "Security"),
    FeedInfo("Bleeping Computer", "https://www.bleepingcomputer.com/feed/", "Security"),
    FeedInfo(
        "The Hacker News",
        "https://feeds.feedburner.com/TheHackersNews",
        "Security",
    ),

    # AI 与机器学习
    FeedInfo("OpenAI Blog", "https://openai.com/blog/rss/", "AI"),
    FeedInfo("DeepMind Blog", "https://deepmind.google/blog/rss.xml", "AI"),
    FeedInfo("Anthropic News", "https://www.anthropic.com/news/rss.xml", "AI"),
    FeedInfo("Papers with Code", "https://paperswithcode.com/feed.xml", "AI"),
    FeedInfo("Towards Data Science", "https://towardsdatascience.com/feed", "AI"),

    # 设计
    FeedInfo("Smashing Magazine", "https://www.smashingmagazine.com/feed/", "Design"),
    FeedInfo("A List Apart", "https://alistapart.com/main/feed/", "Design"),
    FeedInfo("CSS-Tricks", "https://css-tricks.com/feed/", "Design"),
    FeedInfo("Codrops", "https://tympanus.net/codrops/feed/", "Design"),
    FeedInfo("Dribbble", "https://dribbble.com/shots.rss", "Design"),

    # 游戏
    FeedInfo("IGN", "https://feeds.ign.com/ign/all", "Gaming"),
    FeedInfo("GameSpot", "https://www.gamespot.com/feeds/mashup/", "Gaming"),
    FeedInfo("Polygon", "https://www.polygon.com/rss/index.xml", "Gaming"),
    FeedInfo("Kotaku", "https://kotaku.com/rss", "Gaming"),
    FeedInfo("PC Gamer", "https://www.pcgamer.com/rss/", "Gaming"),

    # 加密货币
    FeedInfo("CoinDesk", "https://www.coindesk.com/arc/outboundfeeds/rss/", "Crypto"),
    FeedInfo("Cointelegraph", "https://cointelegraph.com/rss", "Crypto"),
    FeedInfo("Decrypt", "https://decrypt.co/feed", "Crypto"),
    FeedInfo("The Block", "https://www.theblockcrypto.com/rss.xml", "Crypto"),

    # 效率
    FeedInfo("Lifehacker", "https://lifehacker.com/rss", "Productivity"),
    FeedInfo("Zen Habits", "https://zenhabits.net/feed/", "Productivity"),
    FeedInfo(
        "Getting Things Done",
        "https://gettingthingsdone.com/feed/",
        "Productivity",
    ),
    FeedInfo("James Clear", "https://jamesclear.com/feed", "Productivity"),

    # 娱乐与文化
    FeedInfo("The Atlantic", "https://www.theatlantic.com/feed/all/", "Culture"),
    FeedInfo("The New Yorker", "https://www.newyorker.com/feed/everything", "Culture"),
    FeedInfo("Pitchfork", "https://pitchfork.com/rss/reviews/albums/", "Culture"),
    FeedInfo("Rolling Stone", "https://www.rollingstone.com/feed/", "Culture"),
    FeedInfo("Variety", "https://variety.com/feed/", "Culture"),

    # 播客
    FeedInfo("The Daily (NYT)", "https://feeds.simplecast.com/54nAGcIl", "Podcasts"),
    FeedInfo(
        "99% Invisible",
        "https://feeds.99percentinvisible.org/99percentinvisible",
        "Podcasts",
    ),
    FeedInfo("Radiolab", "https://feeds.feedburner.com/radiolab", "Podcasts"),
    FeedInfo("Planet Money", "https://feeds.npr.org/510289/podcast.xml", "Podcasts"),

    # 航天与天文
    FeedInfo("NASA", "https://www.nasa.gov/rss/dyn/breaking_news.rss", "Space"),
    FeedInfo("Space.com", "https://www.space.com/feeds/all", "Space"),
    FeedInfo("Universe Today", "https://www.universetoday.com/feed/", "Space"),
    FeedInfo("ESA", "https://www.esa.int/rssfeed/Our_Activities/Space_News", "Space"),

    # 体育
    FeedInfo("ESPN", "https://www.espn.com/espn/rss/news", "Sports"),
    FeedInfo("The Athletic", "https://theathletic.com/feeds/rss/news/", "Sports"),
    FeedInfo("Bleacher Report", "https://bleacherreport.com/articles/feed", "Sports"),

    # 摄影
    FeedInfo("PetaPixel", "https://petapixel.com/feed/", "Photography"),
    FeedInfo("DPReview", "https://www.dpreview.com/feeds/news.xml", "Photography"),
    FeedInfo("Fstoppers", "https://fstoppers.com/rss.xml", "Photography"),
)

# 空订阅库首次启动时添加的 Feed
STARTER_FEED_TITLES = ("Hacker News", "Daring Fireball", "Swift by Sundell")


def categories() -> list[str]:
    """按字母顺序返回所有分类（去重）."""
    return sorted({feed.category for feed in DEFAULT_FEEDS})


def feeds_for(category: str) -> list[FeedInfo]:
    """返回某个分类下的 Feed，保持目录中的顺序."""
    return [feed for feed in DEFAULT_FEEDS if feed.category == category]


def starter_feeds() -> list[FeedInfo]:
    by_title = {feed.title: feed for feed in DEFAULT_FEEDS}
    return [by_title[title] for title in STARTER_FEED_TITLES]
