"""All magic numbers and configuration constants."""

MAX_CHUNK_CHARS = 4000               # chars per TTS request, below the upstream ceiling
UPSTREAM_TEXT_LIMIT = 4096           # hard input limit of the speech endpoint
SPEAKER_HOST = "host"
SPEAKER_INTERVIEWER = "interviewer"
DEFAULT_SPEAKER = SPEAKER_HOST       # unlabelled script lines are spoken by the host
DEFAULT_SPEAKERS = (SPEAKER_HOST, SPEAKER_INTERVIEWER)
AUDIO_MIME_TYPE = "audio/mpeg"
VIDEO_MIME_TYPE = "video/webm"
OPENAI_TTS_MODEL = "tts-1"                   # tts-1-hd is higher quality, slower
OPENAI_SCRIPT_MODEL = "gpt-4o-mini"
OPENAI_IMAGE_MODEL = "dall-e-3"
OPENAI_IMAGE_SIZE = "1792x1024"
EDGE_TTS_RATE = "+0%"                        # speech rate for edge-tts voices
MEDIA_LOAD_TIMEOUT_S = 10.0                  # audio metadata probe timeout
FALLBACK_DURATION_S = 60.0                   # used when audio reports no usable duration
STOP_GRACE_S = 0.5                           # recorded past the end of the audio
PROGRESS_INTERVAL_S = 0.1                    # ffmpeg progress report period
VIDEO_WIDTH = 1280
VIDEO_HEIGHT = 720
VIDEO_FPS = 30
VIDEO_BITRATE = "2500k"
HTTP_TIMEOUT_S = 30                          # remote image/audio downloads
DEFAULT_DURATION_LABEL = "5 minutes"
DEFAULT_STYLE = "conversational"
OUTPUT_DIR = "output"
VERSION = "0.1.0"
