"""配置管理模块"""
import os
import copy
import yaml
import logging
from typing import Dict, Any, Optional

logger = logging.getLogger(__name__)

DEFAULT_CONFIG: Dict[str, Any] = {
    'global': {
        'request_timeout': 10,
        'default_provider': 'gequbao',
    },
    'download': {
        'directory': 'downloads',
        'delay': 1.0,
    },
    'gequbao': {
        'enabled': True,
    },
    'qqmp3': {
        'enabled': True,
    },
}


class Config:
    def __init__(self, config_path: str = None):
        """初始化配置管理器"""
        if config_path:
            self.config_path = os.path.abspath(config_path)
        else:
            # 当前工作目录，安装后的包目录不可写入配置
            self.config_path = os.path.join(os.getcwd(), 'config.yaml')

        logger.debug(f"使用配置文件路径: {self.config_path}")
        self.config = self._load_config()

    def _load_config(self) -> Dict[str, Any]:
        """加载配置文件，缺失的配置项使用默认值补齐"""
        default_config = copy.deepcopy(DEFAULT_CONFIG)

        try:
            if not os.path.exists(self.config_path):
                os.makedirs(os.path.dirname(self.config_path), exist_ok=True)
                with open(self.config_path, 'w', encoding='utf-8') as f:
                    yaml.safe_dump(default_config, f, allow_unicode=True, default_flow_style=False)
                logger.info(f"已创建默认配置文件: {self.config_path}")
                return default_config

            with open(self.config_path, 'r', encoding='utf-8') as f:
                config = yaml.safe_load(f)
                logger.debug(f"从配置文件加载的内容: {config}")

            if not config:
                logger.warning("配置文件为空，使用默认配置")
                return default_config

            if not isinstance(config, dict):
                logger.warning("配置文件格式不正确，使用默认配置")
                return default_config

            merged_config = default_config
            for section, values in config.items():
                if isinstance(values, dict) and isinstance(merged_config.get(section), dict):
                    merged_config[section].update(values)
                else:
                    merged_config[section] = values
            return merged_config

        except Exception as e:
            logger.error(f"加载配置文件失败: {str(e)}")
            logger.info("使用默认配置")
            return default_config

    def get_source_config(self, source_name: str) -> Optional[Dict[str, Any]]:
        """获取指定数据源的配置"""
        return self.config.get(source_name)

    def is_source_enabled(self, source_name: str) -> bool:
        """检查数据源是否启用"""
        source_config = self.get_source_config(source_name)
        return isinstance(source_config, dict) and source_config.get('enabled', False)

    @property
    def request_timeout(self) -> float:
        """单次外部请求的超时（秒）"""
        return float(self.get('global.request_timeout', 10))

    @property
    def default_provider(self) -> str:
        return self.get('global.default_provider', 'gequbao')

    def get(self, key: str, default: Any = None) -> Any:
        """
        获取配置项值

        Args:
            key: 配置项键名，支持嵌套键，如 "global.request_timeout"
            default: 默认值

        Returns:
            配置项值，如果不存在则返回默认值
        """
        keys = key.split('.')
        value = self.config
        for k in keys:
            if isinstance(value, dict) and k in value:
                value = value[k]
            else:
                return default
        return value
