"""BarManga - Spanish manhua and manhwa aggregator on the Madara theme."""

from mangaweave.core.tags import Tags
from mangaweave.plugins import common, madara
from mangaweave.plugins.base import SitePlugin


@madara.MangaCSS(r'^{origin}/manga/[^/]+/$', 'ol.breadcrumb li:last-of-type a')
@madara.MangasMultiPageAJAX()
@madara.ChaptersSinglePageAJAXv2()
@madara.PagesSinglePageCSS()
@common.ImageAjax()
class BarManga(SitePlugin):

    identifier = "barmanga"
    title = "BarManga"
    uri = "https://libribar.com"
    tags = (Tags.Media.MANHUA, Tags.Media.MANHWA, Tags.Language.SPANISH, Tags.Source.AGGREGATOR)
