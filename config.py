from pathlib import Path
import os

from dotenv import load_dotenv

# 从当前工作目录的.env文件读取配置（不存在时使用环境变量和默认值）
load_dotenv()


def _env_flag(name, default):
    """读取布尔型环境变量"""
    value = os.getenv(name)
    if value is None or value == '':
        return default
    return value.strip().lower() in ('1', 'true', 'yes', 'on')


# 目录配置
APP_DIR = Path(os.getenv('IDSVC_APP_DIR', Path(__file__).resolve().parent))
LOG_DIR = APP_DIR / 'logs'

# 日志级别
LOG_LEVEL = os.getenv('IDSVC_LOG_LEVEL', 'INFO').upper()

# ID字段配置
MAX_FIELD_BYTES = 8           # 一个64位计数器支撑所有维度，ID最长8字节
MAX_ID = 2 ** 64 - 1          # 无符号64位计数器的最大值

# ID服务配置
ID_SERVICE_THREAD_SAFE = _env_flag('IDSVC_THREAD_SAFE', True)
# 允许截断时，超出字段宽度的ID会静默冲突，仅用于兼容旧数据
ID_SERVICE_ALLOW_TRUNCATION = _env_flag('IDSVC_ALLOW_TRUNCATION', False)

# 数据立方体维度配置
DIMENSION_CONFIG = {
    # 高基数字符串维度，使用ID替换以缩短行键
    'user_id': {
        'do_id_substitution': True,
        'num_field_bytes': 4
    },
    'device_uuid': {
        'do_id_substitution': True,
        'num_field_bytes': 5
    },
    'app_version': {
        'do_id_substitution': True,
        'num_field_bytes': 2
    },

    # 低基数维度
    'os_family': {
        'do_id_substitution': True,
        'num_field_bytes': 1
    },

    # 已经是定长数值，不需要替换
    'hour': {
        'do_id_substitution': False,
        'num_field_bytes': 8
    },
}
