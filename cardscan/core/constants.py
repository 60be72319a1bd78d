from typing import Final, List

# Name scoring against catalog entries. Hand-tuned calibration values.
SCORE_NAME_EXACT: Final[int] = 60
SCORE_NAME_PREFIX: Final[int] = 40
SCORE_NAME_SUBSTRING: Final[int] = 25
SCORE_NAME_FUZZY_BASE: Final[int] = 35
SCORE_NAME_FUZZY_STEP: Final[int] = 10
SCORE_NAME_FUZZY_FAR: Final[int] = 10
FUZZY_NEAR_DISTANCE: Final[int] = 2
FUZZY_FAR_DISTANCE: Final[int] = 4
EDIT_DISTANCE_MAX_LEN: Final[int] = 40
SCORE_COLLECTOR_NUMBER: Final[int] = 25
SCORE_SET_CODE: Final[int] = 15

# OCR confidence
CONF_NAME_MIN: Final[int] = 40
CONF_NAME_LONG: Final[int] = 10
CONF_NAME_MIN_LEN: Final[int] = 3
CONF_NAME_LONG_LEN: Final[int] = 6
CONF_NUMBER_WELL_FORMED: Final[int] = 30
CONF_NUMBER_MALFORMED: Final[int] = 15
CONF_SET_CODE: Final[int] = 20
CONF_MAX: Final[int] = 100

# Identification policy defaults
SEARCH_LIMIT: Final[int] = 3
AUTO_CONFIRM_THRESHOLD: Final[int] = 80
DISAMBIGUATION_MARGIN: Final[int] = 20
MIN_CANDIDATE_SCORE: Final[int] = 20

# Scan gate defaults (seconds)
STABILITY_WINDOW_S: Final[float] = 0.4
DEDUP_WINDOW_S: Final[float] = 3.0
MIN_ACCEPT_SCORE: Final[int] = 45

# Frame text heuristics for picking the card name line
MIN_NAME_LEN: Final[int] = 3
MAX_NAME_LEN: Final[int] = 40

# Remote catalog
IDENTIFY_PATH: Final[str] = "/v1/scan/identify"
RETRYABLE_STATUS = (429, 500, 502, 503, 504)
BACKOFF_S: Final[List[float]] = [0.2, 1.0, 3.0]
