"""JiangzaiToon - Turkish manhwa website on the Madara theme."""

from mangaweave.core.tags import Tags
from mangaweave.plugins import common, madara
from mangaweave.plugins.base import SitePlugin


@madara.MangaCSS(r'^{origin}/manga/[^/]+/$')
@madara.MangasMultiPageAJAX()
@madara.ChaptersSinglePageAJAXv1()
@madara.PagesSinglePageCSS()
@common.ImageAjax()
class JiangzaiToon(SitePlugin):

    identifier = "jiangzaitoon"
    title = "JiangzaiToon"
    uri = "https://jiangzaitoon.lgbt"
    tags = (Tags.Media.MANHWA, Tags.Language.TURKISH, Tags.Source.AGGREGATOR)
