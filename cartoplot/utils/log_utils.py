#
#    Copyright (C) 2024-2025 The University of Sydney, Australia
#
#    This program is free software; you can redistribute it and/or modify it under
#    the terms of the GNU General Public License, version 2, as published by
#    the Free Software Foundation.
#
#    This program is distributed in the hope that it will be useful, but WITHOUT
#    ANY WARRANTY; without even the implied warranty of MERCHANTABILITY or
#    FITNESS FOR A PARTICULAR PURPOSE.  See the GNU General Public License
#    for more details.
#
#    You should have received a copy of the GNU General Public License along
#    with this program; if not, write to Free Software Foundation, Inc.,
#    51 Franklin Street, Fifth Floor, Boston, MA  02110-1301, USA.
#
import logging.config
import logging.handlers
import os

import yaml


# configurate the logging utility
def setup_logging():
    cfg_file_path = (
        f"{os.path.dirname(os.path.realpath(__file__))}/../logging_config.yaml"
    )
    if os.path.isfile(cfg_file_path):
        with open(cfg_file_path, "rt") as f:
            config = yaml.safe_load(f.read())
        logging.config.dictConfig(config)

        for h in logging.getLogger("cartoplot").handlers:
            logging.getLogger("cartoplot").debug(h)
    if get_debug_level() > 0:
        turn_on_debug_logging()


def turn_on_debug_logging():
    debug_formatter = logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s [%(module)s:%(filename)s:%(lineno)s]"
    )
    cartoplot_logger = logging.getLogger("cartoplot")
    cartoplot_logger.setLevel(logging.DEBUG)
    for h in cartoplot_logger.handlers:
        h.setLevel(logging.DEBUG)
        h.setFormatter(debug_formatter)

    cartoplot_logger.debug("The cartoplot debug logging has been turned on.")


def get_debug_level():
    value = os.environ.get("CARTOPLOT_DEBUG")
    if value is None:
        return 0
    if value.lower() == "true":
        return 1
    try:
        return int(value)
    except ValueError:
        return 0
