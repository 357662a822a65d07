"""
AlbumServer - Bottle application serving an album tree.

Routes:
    /css/<file>, /js/<file>, /html/<file>, /img/<file>  theme static files
    /                                                   album root page
    /<path>                                             resolved against the tree
"""

import logging
import os
from mimetypes import guess_type
from socketserver import ThreadingMixIn
from typing import Dict, Optional
from wsgiref.simple_server import WSGIServer

from bottle import Bottle, HTTPError, abort, request, response, run, static_file

from .config import AlbumConfig, str2bool
from .errors import GalleryError, ThumbnailDecodeError
from .live_tree import LiveTree
from .resolver import Resolution, ResolutionKind, resolve
from .theme import STATIC_FOLDERS, Theme
from .thumbnails import ThumbnailCache


class ThreadingWSGIServer(ThreadingMixIn, WSGIServer):
    """wsgiref server handling each request in its own thread."""
    daemon_threads = True


class AlbumServer:
    """
    Serves folder pages, picture pages, raw pictures and thumbnails.

    Every request resolves against the tree published by the LiveTree at
    the moment the request starts.
    """

    def __init__(
        self,
        config: AlbumConfig,
        tree: LiveTree,
        thumbnails: ThumbnailCache,
        theme: Optional[Theme] = None,
        metadata: Optional[Dict[str, str]] = None,
        logger: Optional[logging.Logger] = None
    ):
        self.config = config
        self.tree = tree
        self.thumbnails = thumbnails
        self.logger = logger or logging.getLogger(__name__)
        self.theme = theme or Theme(logger=self.logger)
        self.metadata = metadata or {}
        self.app = Bottle()
        self._setup_routes()

    def log(self, msg: str) -> None:
        self.logger.debug(msg)

    def _setup_routes(self) -> None:
        for folder in STATIC_FOLDERS:
            self.app.route(
                f'/{folder}/<filename:path>',
                method=['GET', 'HEAD'],
                callback=self._static_handler(folder),
            )
        self.app.route('/', method=['GET', 'HEAD'], callback=self.dispatch)
        self.app.route('/<path:path>', method=['GET', 'HEAD'], callback=self.dispatch)
        self.app.error(404)(self.error_page)
        self.app.error(500)(self.error_page)

    def _static_handler(self, folder: str):
        def serve_static(filename):
            root = self.theme.static_root(folder)
            if root is None:
                abort(404, f"Theme has no {folder} folder")
            return static_file(filename, root=root)
        return serve_static

    def dispatch(self, path: str = ''):
        """Resolve a request path and serve whatever it points at."""
        root = self.tree.root
        raw = str2bool(request.query.get('raw'))
        resolution = resolve(root, path, raw=raw)
        self.log(f"Resolved /{path} (raw={raw}) to {resolution.kind.value}")

        if resolution.kind is ResolutionKind.FOLDER:
            response.content_type = 'text/html; charset=utf-8'
            return self._render(lambda: self.theme.render_folder(resolution.group, self.metadata))

        if resolution.kind is ResolutionKind.IMAGE_PAGE:
            response.content_type = 'text/html; charset=utf-8'
            return self._render(lambda: self.theme.render_picture(resolution.image, self.metadata))

        if resolution.kind is ResolutionKind.RAW_IMAGE:
            image_path = os.path.abspath(resolution.image.path)
            mimetype, _ = guess_type(resolution.image.file_name)
            return static_file(
                os.path.basename(image_path),
                root=os.path.dirname(image_path),
                mimetype=mimetype or 'application/octet-stream',
            )

        if resolution.kind is ResolutionKind.THUMBNAIL:
            return self._serve_thumbnail(resolution)

        if resolution.kind is ResolutionKind.FORBIDDEN:
            self.log(f"Thumbnail size {resolution.width}x{resolution.height} not allowed for /{path}")
            abort(403, f"Thumbnail size {resolution.width}x{resolution.height} is not allowed")

        abort(404, f"Not found: /{path}")

    def _render(self, render):
        try:
            return render()
        except GalleryError as e:
            self.logger.error(f"Rendering failed: {e}")
            abort(500, f"Rendering failed: {e}")

    def _serve_thumbnail(self, resolution: Resolution):
        image = resolution.image
        try:
            thumb_path = self.thumbnails.ensure(image, resolution.width, resolution.height)
            mimetype = self.thumbnails.content_type(thumb_path)
        except ThumbnailDecodeError as e:
            self.logger.error(f"Cannot create thumbnail for {image.path}: {e}")
            abort(500, "Cannot create thumbnail")
        except GalleryError as e:
            self.logger.error(f"Thumbnail failure for {image.path}: {e}")
            abort(500, "Cannot create thumbnail")

        return static_file(
            os.path.basename(thumb_path),
            root=os.path.dirname(os.path.abspath(thumb_path)),
            mimetype=mimetype,
        )

    def error_page(self, error: HTTPError) -> str:
        """Render 404 and 500 with the theme's html pages when it has them."""
        themed = self.theme.error_page(error.status_code)
        if themed is not None:
            response.content_type = 'text/html; charset=utf-8'
            return themed
        response.content_type = 'text/plain; charset=utf-8'
        return f"{error.status_code} - {error.body}"

    def serve(self) -> None:
        """Run the HTTP server until interrupted."""
        options = {}
        if self.config.server == 'wsgiref':
            options['server_class'] = ThreadingWSGIServer
        self.logger.info(f"Serving {self.config.album_path} on {self.config.host}:{self.config.port}")
        run(
            app=self.app,
            host=self.config.host,
            port=self.config.port,
            server=self.config.server,
            debug=self.config.debug,
            quiet=not self.config.debug,
            **options
        )


def create_app(
    config: AlbumConfig,
    theme: Optional[Theme] = None,
    metadata: Optional[Dict[str, str]] = None,
    update: bool = False,
    logger: Optional[logging.Logger] = None
) -> AlbumServer:
    """
    Build the album tree and the server around it.

    Args:
        config: Album configuration
        theme: Theme to render with, the built in templates if None
        metadata: Site wide values passed to the templates
        update: Reconcile sidecars with disk while loading
        logger: Optional logger instance

    Returns:
        AlbumServer ready to serve; its WSGI application is `.app`
    """
    from .builder import GroupBuilder
    from .thumbnails import ThumbnailGenerator

    logger = logger or logging.getLogger(__name__)
    thumbnails = ThumbnailCache(
        ThumbnailGenerator(config.thumbnail_quality, logger=logger), logger=logger
    )
    builder = GroupBuilder(config, thumbnails, logger=logger)
    tree = LiveTree(builder, logger=logger)
    if update:
        tree.reload()
    else:
        tree.load()
    return AlbumServer(config, tree, thumbnails, theme=theme, metadata=metadata, logger=logger)
