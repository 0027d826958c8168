"""
warehouse/queries.py

SQL text builders for every warehouse feed.

Each builder returns a :class:`WarehouseQuery` whose filters travel as bind
parameters; nothing user-supplied is interpolated into the SQL text.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from reporting.geography import PERIOD_MONTHLY
from reporting.window import ReportWindow

# Offline full-price / outlet shops in either channel.
_SHOP_SCOPE = """
          AND m.anlys_onoff_cls_nm = 'Offline'
          AND m.anlys_shop_type_nm IN ('FO', 'FP')
          AND m.fr_or_cls IN ('FR', 'OR')
"""


@dataclass(frozen=True)
class WarehouseQuery:
    sql: str
    params: dict[str, Any] = field(default_factory=dict)


def _window_params(window: ReportWindow) -> dict[str, Any]:
    return {"brand": window.brand, "start_ym": window.start_ym, "end_ym": window.end_ym}


def sales_report_query(window: ReportWindow) -> WarehouseQuery:
    """Monthly sales per shop with shop master attributes."""
    sql = f"""
      WITH base AS (
        SELECT
              TO_CHAR(s.sale_dt, 'YYYY-MM') AS sale_ym
            , s.shop_id
            , m.shop_nm_en
            , m.fr_or_cls
            , m.open_dt
            , s.oa_shop_id
            , SUM(s.sale_amt) AS sale_amt
            , m.city_nm
            , m.city_tier_nm
            , m.shop_level_nm
            , m.sale_region_nm
        FROM chn.dw_sale s
        JOIN chn.mst_shop_all m
          ON s.shop_id = m.shop_id
        WHERE s.brd_cd = :brand
          AND TO_CHAR(s.sale_dt, 'YYYY-MM') BETWEEN :start_ym AND :end_ym
{_SHOP_SCOPE}
        GROUP BY
              TO_CHAR(s.sale_dt, 'YYYY-MM')
            , s.shop_id
            , m.shop_nm_en
            , m.fr_or_cls
            , m.open_dt
            , s.oa_shop_id
            , m.city_nm
            , m.city_tier_nm
            , m.shop_level_nm
            , m.sale_region_nm
      )
      SELECT *
      FROM base
      ORDER BY sale_ym, shop_id
    """
    return WarehouseQuery(sql=sql, params=_window_params(window))


def dealer_shipment_query(window: ReportWindow) -> WarehouseQuery:
    """Shipments invoiced to each dealer account, per month."""
    sql = """
      SELECT
          TO_CHAR(d.pst_dt, 'YYYY-MM') AS sale_ym,
          a.account_id,
          a.account_nm_en,
          a.hq_sap_id,
          ROUND(SUM(d.tag_sale_amt), 2) AS shipment_amt
      FROM sap_fnf.dw_cn_copa_d d
      LEFT JOIN chn.mst_account a
        ON TRIM(a.hq_sap_id) = LPAD(TO_VARCHAR(d.sap_shop_cd), 10, '0')
        AND TRIM(a.hq_sap_id) <> '*'
      WHERE d.chnl_cd = '84'
        AND d.brd_cd = :brand
        AND TO_CHAR(d.pst_dt, 'YYYY-MM') BETWEEN :start_ym AND :end_ym
        AND a.account_id IS NOT NULL
      GROUP BY TO_CHAR(d.pst_dt, 'YYYY-MM'), a.account_id, a.account_nm_en, a.hq_sap_id
      ORDER BY a.account_id, sale_ym
    """
    return WarehouseQuery(sql=sql, params=_window_params(window))


def dealer_sales_query(window: ReportWindow) -> WarehouseQuery:
    """Sell-through of dealer-operated shops, per account and month."""
    sql = """
      WITH shop_map AS (
          SELECT
              shop_id,
              account_id,
              fr_or_cls
          FROM chn.dw_shop_wh_detail
          QUALIFY ROW_NUMBER() OVER (
              PARTITION BY shop_id
              ORDER BY open_dt DESC NULLS LAST
          ) = 1
      )
      SELECT
          TO_CHAR(s.sale_dt, 'YYYY-MM') AS sale_ym,
          m.account_id,
          a.account_nm_en,
          a.hq_sap_id,
          ROUND(SUM(s.tag_amt), 2) AS sales_amt
      FROM chn.dw_sale s
      LEFT JOIN shop_map m ON s.shop_id = m.shop_id
      LEFT JOIN chn.mst_account a ON m.account_id = a.account_id
      WHERE m.fr_or_cls = 'FR'
        AND s.brd_cd = :brand
        AND TO_CHAR(s.sale_dt, 'YYYY-MM') BETWEEN :start_ym AND :end_ym
        AND m.account_id IS NOT NULL
      GROUP BY TO_CHAR(s.sale_dt, 'YYYY-MM'), m.account_id, a.account_nm_en, a.hq_sap_id
      ORDER BY m.account_id, sale_ym
    """
    return WarehouseQuery(sql=sql, params=_window_params(window))


def discount_rate_query(window: ReportWindow) -> WarehouseQuery:
    """``1 - sale / tag`` per month and channel."""
    sql = f"""
      WITH base AS (
        SELECT
              TO_CHAR(s.sale_dt, 'YYYY-MM') AS sale_ym
            , m.fr_or_cls AS channel
            , SUM(s.sale_amt) AS sale_amt_sum
            , SUM(s.tag_amt) AS tag_amt_sum
        FROM chn.dw_sale s
        JOIN chn.mst_shop_all m
          ON s.shop_id = m.shop_id
        WHERE s.brd_cd = :brand
          AND TO_CHAR(s.sale_dt, 'YYYY-MM') BETWEEN :start_ym AND :end_ym
          AND s.tag_amt > 0
{_SHOP_SCOPE}
        GROUP BY
              TO_CHAR(s.sale_dt, 'YYYY-MM')
            , m.fr_or_cls
      )
      SELECT
            sale_ym
          , channel
          , CASE
              WHEN tag_amt_sum > 0 THEN 1 - (sale_amt_sum / tag_amt_sum)
              ELSE 0
            END AS discount_rate
      FROM base
      ORDER BY sale_ym, channel
    """
    return WarehouseQuery(sql=sql, params=_window_params(window))


def _period_params(window: ReportWindow, period: str) -> dict[str, Any]:
    """``monthly`` covers the window's last month; ``cumulative`` the whole window."""
    params = _window_params(window)
    if period == PERIOD_MONTHLY:
        params["start_ym"] = window.end_ym
    return params


def city_sales_query(window: ReportWindow, period: str) -> WarehouseQuery:
    sql = f"""
      WITH shop_sales AS (
        SELECT
          s.shop_id,
          m.shop_nm_en,
          m.city_nm,
          m.city_tier_nm,
          SUM(s.sale_amt) AS sale_amt
        FROM chn.dw_sale s
        JOIN chn.mst_shop_all m ON s.shop_id = m.shop_id
        WHERE s.brd_cd = :brand
          AND TO_CHAR(s.sale_dt, 'YYYY-MM') BETWEEN :start_ym AND :end_ym
{_SHOP_SCOPE}
        GROUP BY s.shop_id, m.shop_nm_en, m.city_nm, m.city_tier_nm
      )
      SELECT
        shop_id,
        shop_nm_en,
        city_nm,
        city_tier_nm,
        sale_amt
      FROM shop_sales
      ORDER BY city_nm, sale_amt DESC
    """
    return WarehouseQuery(sql=sql, params=_period_params(window, period))


def shop_products_query(window: ReportWindow, period: str, shop_id: str, limit: int = 5) -> WarehouseQuery:
    sql = """
      SELECT
        s.prdt_cd,
        COALESCE(p.prdt_nm_kr, s.prdt_cd) AS prdt_nm_kr,
        SUM(s.sale_amt) AS sale_amt,
        SUM(s.tag_amt) AS tag_amt
      FROM chn.dw_sale s
      LEFT JOIN chn.mst_prdt p ON s.prdt_cd = p.prdt_cd
      WHERE s.brd_cd = :brand
        AND s.shop_id = :shop_id
        AND TO_CHAR(s.sale_dt, 'YYYY-MM') BETWEEN :start_ym AND :end_ym
      GROUP BY s.prdt_cd, p.prdt_nm_kr
      ORDER BY sale_amt DESC
      LIMIT :limit
    """
    params = _period_params(window, period)
    params.update(shop_id=shop_id, limit=limit)
    return WarehouseQuery(sql=sql, params=params)
