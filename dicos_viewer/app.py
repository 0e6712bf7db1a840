# -*- coding: utf-8 -*-
"""
程序入口：解析命令行、配置日志、组装 MVVM 并启动 Qt 事件循环。
"""

import logging
import os
import sys
from typing import Optional, Sequence

from PySide6.QtWidgets import QApplication

from dicos_viewer import __version__
from dicos_viewer.config import ViewerConfig
from dicos_viewer.logging_setup import append_context, configure_logging
from dicos_viewer.viewmodels import MainViewModel
from dicos_viewer.views import MainWindow

logger = logging.getLogger(__name__)

# 构建时可通过环境变量注入
GIT_SHA = os.environ.get("DICOS_VIEWER_GIT_SHA", "NA")


def main(argv: Optional[Sequence[str]] = None) -> int:
    config = ViewerConfig.from_args(argv)
    configure_logging(
        level=config.log_level,
        json_format=config.log_json,
        source=config.log_source,
        log_file=config.log_file,
    )
    append_context(app="dicos-viewer", version=__version__, git=GIT_SHA)

    app = QApplication.instance() or QApplication(sys.argv[:1])
    view_model = MainViewModel(
        default_level=config.default_level,
        default_width=config.default_width,
    )
    window = MainWindow(view_model)
    window.resize(*config.window_size)

    if config.path:
        # 启动参数中的路径：目录加载全部帧，文件直接打开
        if not view_model.load_path(config.path):
            logger.error("failed to load path", extra={"path": config.path})

    if config.full_screen:
        window.showFullScreen()
    else:
        window.show()
    return app.exec()


if __name__ == "__main__":
    sys.exit(main())
