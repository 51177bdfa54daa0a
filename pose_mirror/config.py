ENABLE_DISPLAY = True      # Set to False for headless mode, avoid showing the windows on the screen
LOG_INTERVAL = 30          # Ticks between frame/FPS log lines
LOG_LEVEL = "INFO"

# Camera settings
CAM_INDEX = 0
CAPTURE_WIDTH = 640
CAPTURE_HEIGHT = 480

# Image pre-processing settings
FLIP_VERTICAL = False
FLIP_HORIZONTAL = True     # Mirror the webcam so the avatar follows the user naturally
ROTATE_180 = False

# Detector settings
DETECTOR = "yolo"
SCORE_THRESHOLD = 0.5      # Strictly greater than this counts as a confident detection
SUBJECT_LABEL = "person"

# Tick scheduler
TICK_INTERVAL_S = 0.1
SINGLE_FLIGHT = True       # Drop a tick while the previous detection is still pending

# Pose synthesis
SENSITIVITY = 8.0          # Degrees per pixel of bbox displacement
RESET_BASELINE_ON_LOSS = False
POSE_SMOOTHING_ALPHA = None  # e.g. 0.35 to low-pass the pose; None keeps raw jitter

# Avatar surface
AVATAR_WIDTH = 800
AVATAR_HEIGHT = 600
