# src/i18n_behavior/exceptions.py
"""
本模块定义了 i18n-behavior 项目中所有自定义的、语义化的异常类型。

构建期错误（ConfigError 及其子类）会中止整个 schema 处理过程；
运行期错误由调用方根据类型决定恢复策略。
"""


class I18nBehaviorError(Exception):
    """
    所有 i18n-behavior 自定义异常的通用基类。
    捕获此异常可以处理所有源自本项目的预期错误。
    """
    pass


class ConfigError(I18nBehaviorError):
    """
    表示 schema 配置格式错误或相互矛盾。
    在构建期检测，致命，整个生成过程随之中止。
    """
    pass


class ResolutionError(I18nBehaviorError):
    """
    表示为一条尚无主键、暂时无法关联的基础记录解析翻译。
    解析器会捕获它并推迟关联，直到基础记录被保存。
    """
    pass


class QueryCompositionError(ConfigError):
    """
    表示在没有有效翻译关系的表上调用了翻译 join 或子查询。
    对当前查询的构建是致命的，直接抛给调用方。
    """
    pass


class UnknownFieldError(I18nBehaviorError, KeyError):
    """
    表示访问了记录上不存在的字段。
    继承自 KeyError 是为了保持与字典查找行为的一致性。
    """
    pass
