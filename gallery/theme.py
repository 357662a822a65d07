"""
Theme - Templates and static files used to render an album.

A theme folder looks like:

    theme.json              {"name": "..."}
    templates/page.tpl      folder pages
    templates/single.tpl    picture pages
    css/ js/ img/           served under /css, /js and /img
    html/                   served under /html; 404.html and 500.html
                            replace the default error pages

Templates use Bottle's SimpleTemplate syntax and receive `page` (a
FolderPage or ImagePage) and `metadata` (site wide key/values).
"""

import json
import logging
import os
import threading
from typing import Dict, Optional

from bottle import SimpleTemplate

from .errors import ThemeError
from .models import Group, ImageItem
from .views import FolderPage, ImagePage

TEMPLATES_FOLDER = 'templates'
PAGE_TEMPLATE = 'page.tpl'
SINGLE_TEMPLATE = 'single.tpl'
THEME_CONFIG = 'theme.json'

STATIC_FOLDERS = ('js', 'css', 'html', 'img')
THEME_FOLDERS = (TEMPLATES_FOLDER,) + STATIC_FOLDERS

DEFAULT_PAGE_TEMPLATE = """<!DOCTYPE html>
<html>
<head>
    <meta charset="utf-8">
    <title>{{page.display_title}}</title>
    <meta name="description" content="{{page.description}}">
</head>
<body>
<nav class="breadcrumb">
    <p>
    % for crumb in page.ancestors:
        <a href="{{crumb.traverse_path}}">{{crumb.display_title}}</a>/
    % end
    </p>
</nav>
<nav class="tree">
    % for sibling in page.siblings:
    <a href="{{sibling.traverse_path}}" class="sibling_album{{' current_album' if sibling.current else ''}}">{{sibling.display_title}}</a>
    % end
    % for child in page.children:
    <a href="{{child.traverse_path}}" class="child_album">{{child.display_title}}</a>
    % end
</nav>
<header>
    <h1>{{page.display_title}}</h1>
    <p>{{page.description}}</p>
</header>
<main>
    % for image in page.images:
    <section class="thumb">
        <a href="{{image.relative_path}}">
            <img src="{{image.thumb_path()}}" alt="{{image.display_title}}">
            <p>{{image.description}}</p>
        </a>
    </section>
    % end
</main>
<footer></footer>
</body>
</html>
"""

DEFAULT_SINGLE_TEMPLATE = """<!DOCTYPE html>
<html>
<head>
    <meta charset="utf-8">
    <title>{{page.display_title}}</title>
    <meta name="description" content="{{page.description}}">
</head>
<body>
<nav class="breadcrumb">
    <p>
    % for crumb in page.ancestors:
        <a href="{{crumb.traverse_path}}">{{crumb.display_title}}</a>/
    % end
    </p>
</nav>
<nav class="tree">
    % for sibling in page.siblings:
    <a href="{{sibling.relative_path}}" class="sibling_picture{{' current_image' if sibling.current else ''}}">{{sibling.display_title}}</a>
    % end
    % for child in page.children:
    <a href="{{child.traverse_path}}" class="sibling_album">{{child.display_title}}</a>
    % end
</nav>
<nav class="relative">
    % for css_class, target in (('first_picture', page.first), ('previous_picture', page.previous), ('next_picture', page.next), ('last_picture', page.last)):
    % if target is not None:
    <a href="{{target.relative_path}}" class="{{css_class}}">{{target.display_title}}</a>
    % end
    % end
</nav>
<header>
    <h1>{{page.display_title}}</h1>
</header>
<main>
    <img src="{{page.raw_path}}" alt="{{page.display_title}}">
    <p>{{page.description}}</p>
</main>
<footer></footer>
</body>
</html>
"""

DEFAULT_TEMPLATES = {
    PAGE_TEMPLATE: DEFAULT_PAGE_TEMPLATE,
    SINGLE_TEMPLATE: DEFAULT_SINGLE_TEMPLATE,
}


class Theme:
    """
    A set of templates to display album folders and single pictures.

    A theme without a path renders with the built in templates and serves
    no static files.
    """

    def __init__(
        self,
        name: str = 'default',
        path: Optional[str] = None,
        logger: Optional[logging.Logger] = None
    ):
        self.name = name
        self.path = path
        self.logger = logger or logging.getLogger(__name__)
        self._templates: Dict[str, SimpleTemplate] = {}
        self._templates_lock = threading.Lock()

    def create(self) -> None:
        """
        Create the folders and files a theme needs.

        Existing files are left untouched.

        Raises:
            ThemeError: If the theme has no path or it is not a folder
        """
        if not self.path:
            raise ThemeError("no path was provided for the theme")
        self._ensure_folder(self.path)
        for folder in THEME_FOLDERS:
            self._ensure_folder(os.path.join(self.path, folder))

        for file_name, source in DEFAULT_TEMPLATES.items():
            self._write_if_missing(os.path.join(self.path, TEMPLATES_FOLDER, file_name), source)

        self.write_config()
        self.logger.info(f"Theme {self.name!r} ready in {self.path}")

    @staticmethod
    def _ensure_folder(folder: str) -> None:
        if os.path.exists(folder) and not os.path.isdir(folder):
            raise ThemeError(f"theme path does not point to a folder: {folder}")
        try:
            os.makedirs(folder, exist_ok=True)
        except OSError as e:
            raise ThemeError(f"cannot create theme folder {folder}: {e}")

    def _write_if_missing(self, file_path: str, contents: str) -> None:
        if os.path.exists(file_path):
            return
        try:
            with open(file_path, 'w', encoding='utf-8') as f:
                f.write(contents)
        except OSError as e:
            raise ThemeError(f"cannot write template {file_path}: {e}")
        self.logger.debug(f"Wrote default template {file_path}")

    def write_config(self) -> None:
        """Write theme.json with the theme name."""
        config_path = os.path.join(self.path, THEME_CONFIG)
        try:
            with open(config_path, 'w', encoding='utf-8') as f:
                json.dump({'name': self.name}, f, indent=4)
        except OSError as e:
            raise ThemeError(f"cannot write theme config {config_path}: {e}")

    @classmethod
    def load(cls, path: str, logger: Optional[logging.Logger] = None) -> 'Theme':
        """Open an existing theme folder, reading its name from theme.json if present."""
        if not os.path.isdir(path):
            raise ThemeError(f"theme path does not point to a folder: {path}")
        name = os.path.basename(os.path.normpath(path))
        config_path = os.path.join(path, THEME_CONFIG)
        if os.path.isfile(config_path):
            try:
                with open(config_path, encoding='utf-8') as f:
                    name = json.load(f).get('name', name)
            except (OSError, ValueError, AttributeError) as e:
                raise ThemeError(f"cannot read theme config {config_path}: {e}")
        return cls(name=name, path=path, logger=logger)

    def _template(self, file_name: str) -> SimpleTemplate:
        with self._templates_lock:
            template = self._templates.get(file_name)
            if template is not None:
                return template

            if not self.path:
                template = SimpleTemplate(source=DEFAULT_TEMPLATES[file_name])
            else:
                templates_dir = os.path.join(self.path, TEMPLATES_FOLDER)
                file_path = os.path.join(templates_dir, file_name)
                try:
                    with open(file_path, encoding='utf-8') as f:
                        source = f.read()
                except OSError as e:
                    raise ThemeError(f"loading template {file_path}: {e}")
                template = SimpleTemplate(source=source, lookup=[templates_dir])

            self._templates[file_name] = template
            return template

    def render_folder(self, group: Group, metadata: Optional[Dict[str, str]] = None) -> str:
        """Render the page of a folder."""
        page = FolderPage(group, metadata, current=True)
        return self._template(PAGE_TEMPLATE).render(page=page, metadata=page.metadata)

    def render_picture(self, image: ImageItem, metadata: Optional[Dict[str, str]] = None) -> str:
        """Render the page of a single picture."""
        page = ImagePage(image, metadata, current=True)
        return self._template(SINGLE_TEMPLATE).render(page=page, metadata=page.metadata)

    def static_root(self, folder: str) -> Optional[str]:
        """Disk folder served under /<folder>, None if the theme has none."""
        if not self.path or folder not in STATIC_FOLDERS:
            return None
        root = os.path.join(self.path, folder)
        return root if os.path.isdir(root) else None

    def error_page(self, status: int) -> Optional[str]:
        """Contents of html/<status>.html, None if the theme does not define it."""
        root = self.static_root('html')
        if root is None:
            return None
        page_path = os.path.join(root, f"{status}.html")
        try:
            with open(page_path, encoding='utf-8') as f:
                return f.read()
        except FileNotFoundError:
            return None
        except OSError as e:
            self.logger.error(f"Cannot read error page {page_path}: {e}")
            return None
