"""
Manga Crab - Spanish aggregator whose chapter list is rendered client-side.

The chapter list only exists after the page scripts ran, so chapters are
collected by a script evaluated in the container page.
"""

from mangaweave.core.tags import Tags
from mangaweave.plugins import common, madara
from mangaweave.plugins.base import SitePlugin


CHAPTER_SCRIPT = """
    new Promise(resolve => {
        resolve([...document.querySelectorAll('li.wp-manga-chapter a')].map(chapter => {
            return {
                id: chapter.pathname,
                title: chapter.textContent.trim()
            };
        }));
    });
"""


@common.MangaCSS(r'^{origin}/series/[^/]+/$', 'h1.post-title')
@common.MangasMultiPageCSS('/page/{page}/?s&post_type=wp-manga', 'div.post-title h2 > a')
@common.ChaptersSinglePageJS(CHAPTER_SCRIPT, delay=1.5)
@madara.PagesSinglePageCSS()
@common.ImageAjax()
class MangaCrab(SitePlugin):

    identifier = "mangacrab"
    title = "Manga Crab"
    uri = "https://mangacrab.topmanhuas.org"
    tags = (Tags.Media.MANGA, Tags.Media.MANHWA, Tags.Language.SPANISH, Tags.Source.AGGREGATOR)
