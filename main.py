import logging
import sys
from logging.handlers import TimedRotatingFileHandler

from config import LOG_DIR, LOG_LEVEL
from id_service import MapIdService, load_dimensions
from id_service.byte_utils import to_hex


LOG_FORMAT = '%(asctime)s - %(levelname)s - %(message)s'


def _build_handlers(log_file):
    """日志文件按天轮换并保留7天；控制台输出到stderr，stdout只留给编码结果"""
    handlers = [
        TimedRotatingFileHandler(log_file, when='midnight', backupCount=7, encoding='utf-8'),
        logging.StreamHandler(sys.stderr),
    ]
    formatter = logging.Formatter(LOG_FORMAT)
    for handler in handlers:
        handler.setFormatter(formatter)
    return handlers


def setup_logging(log_dir=None):
    """设置日志系统，重复调用不会重复添加处理器"""
    log_dir = log_dir or LOG_DIR
    log_file = (log_dir / 'id_service.log').resolve()

    root = logging.getLogger()
    root.setLevel(LOG_LEVEL)

    already_configured = any(
        isinstance(h, TimedRotatingFileHandler) and h.baseFilename == str(log_file)
        for h in root.handlers
    )
    if already_configured:
        return

    try:
        log_dir.mkdir(parents=True, exist_ok=True)
        for handler in _build_handlers(log_file):
            root.addHandler(handler)
    except OSError as e:
        print(f"日志系统初始化失败: {str(e)}", file=sys.stderr)
        raise

    logging.info(f"日志写入 {log_file}")


def run_encode(dimension_name, values, id_service=None):
    """为指定维度的一组值分配ID，返回 (值, 十六进制ID) 列表"""
    dimensions = load_dimensions()
    if dimension_name not in dimensions:
        raise ValueError(f"未配置的维度: {dimension_name}")

    dimension = dimensions[dimension_name]
    id_service = id_service or MapIdService()

    results = []
    for value in values:
        id_bytes = id_service.get_id(dimension, value.encode('utf-8'))
        results.append((value, to_hex(id_bytes)))

    logging.info(f"维度 {dimension_name} 编码完成，共 {len(results)} 个值")
    return results


def list_dimensions():
    """列出所有已配置的维度"""
    return [
        (name, dimension.num_field_bytes, dimension.do_id_substitution)
        for name, dimension in sorted(load_dimensions().items())
    ]


def print_usage():
    print("可用模式: encode, dimensions")
    print("示例: python main.py encode user_id alice bob alice")
    print("      python main.py dimensions")


def main(argv=None):
    """主函数"""
    if argv is None:
        argv = sys.argv[1:]

    setup_logging()

    if not argv:
        print_usage()
        return 1

    mode = argv[0]
    try:
        if mode == 'encode':
            if len(argv) < 3:
                print_usage()
                return 1
            for value, id_hex in run_encode(argv[1], argv[2:]):
                print(f"{value}\t{id_hex}")
        elif mode == 'dimensions':
            for name, num_field_bytes, do_id_substitution in list_dimensions():
                print(f"{name}\t{num_field_bytes}\t{'substituted' if do_id_substitution else 'raw'}")
        else:
            print(f"未知模式: {mode}")
            print_usage()
            return 1
    except Exception as e:
        logging.error(f"执行 {mode} 失败: {str(e)}")
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
